"""
Workflows module - Job orchestration for digest generation.
"""
from workflows.base import Job
from workflows.create_digest import CREATE_DIGEST_JOB, CreateDigestJob, DigestRun

__all__ = [
    "Job",
    "CREATE_DIGEST_JOB",
    "CreateDigestJob",
    "DigestRun",
]
