"""
Job Board Backend
Stateless request router and validator in front of external stores.

Architecture:
- PostgreSQL: users, jobs, applications (tables, views, stats function)
- MongoDB GridFS: uploaded resume PDFs
- Google: federated sign-in; one configured administrator login
"""

__version__ = "1.0.0"
