# Shared Common Library for the home-services platform
# Authentication, error handling, pagination, middleware, health checks
# and inter-service clients used by the services.

__version__ = "1.0.0"
