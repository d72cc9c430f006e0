"""
Contains base class for digest jobs
"""
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

JobData = TypeVar("JobData")
JobResult = TypeVar("JobResult")


class Job(ABC, Generic[JobData, JobResult]):
    """
    A unit of work invoked by an external scheduler or queue.
    """

    name: str

    @abstractmethod
    async def run(self, job_data: JobData) -> JobResult:
        """
        Execute the job.
        Must raise exceptions on failure (handled upstream).
        """
        raise NotImplementedError
