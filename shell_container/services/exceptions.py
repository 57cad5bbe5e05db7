"""Custom exceptions for service layer."""


class ServiceError(Exception):
    """Base exception for all service-related errors."""

    pass


class DockerServiceError(ServiceError):
    """Exception raised for Docker service operations."""

    pass


class ConfigError(ServiceError):
    """Exception raised when the manager configuration is incomplete."""

    pass


class ImageNotFoundError(DockerServiceError):
    """Exception raised when a Docker image is not found."""

    pass


class ContainerNotFoundError(DockerServiceError):
    """Exception raised when a Docker container is not found."""

    pass


class ResourceConflictError(DockerServiceError):
    """Exception raised when the daemon refuses an operation on a resource in use."""

    pass


class RemovalInProgressError(ResourceConflictError):
    """Exception raised when the daemon is already removing the container."""

    pass


class BuildFailedError(DockerServiceError):
    """Exception raised when an image build reports an error."""

    def __init__(self, message: str, output=None):
        super().__init__(message)
        self.output = output or []
