from .finalize_retry import start_finalization_retry_job

__all__ = ['start_finalization_retry_job']
