from .client import FabricClient, FabricConfig, JobSubmission
from .location import JobLocation, parse_job_location
from .parameters import draft_parameters, format_parameters
from .service import JobDispatcher

__all__ = [
    "FabricClient",
    "FabricConfig",
    "JobDispatcher",
    "JobLocation",
    "JobSubmission",
    "draft_parameters",
    "format_parameters",
    "parse_job_location",
]
