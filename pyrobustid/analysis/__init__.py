#  analysis.__init__.py

from .frequency import (
    freq_response,
    magnitude_response,
    phase_response,
    response_error,
    welch_psd,
    ar_psd,
)

__all__ = [
    "freq_response",
    "magnitude_response",
    "phase_response",
    "response_error",
    "welch_psd",
    "ar_psd",
]
