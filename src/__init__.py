"""Tiered Image Service Package."""

__version__ = "1.0.0"
__author__ = "Bharat kumar"
__description__ = (
    "Serverless tiered image service with signed, time-limited variant access"
)

__all__ = ["handlers", "core"]
