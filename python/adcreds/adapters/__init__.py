"""
adcreds.adapters

Wrappers that attach token source output to a transport's calls.
"""

from adcreds.adapters.grpc import GrpcTokenAuth, grpc_application_default, grpc_jwt
from adcreds.adapters.http import BearerAuth, auth_header

__all__ = [
    "GrpcTokenAuth",
    "grpc_application_default",
    "grpc_jwt",
    "BearerAuth",
    "auth_header",
]
