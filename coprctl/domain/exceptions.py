from typing import Iterable


class CoprException(Exception):
    """Base exception for all Copr repository errors."""
    pass

class ConfigMissingException(CoprException):
    """Raised when an optional configuration file does not exist."""
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Configuration file not found: {path}")

class MalformedProjectSpecException(CoprException):
    """Raised when a project spec is neither OWNER/PROJECT nor HUB/OWNER/PROJECT."""
    def __init__(self, project_spec: str):
        self.project_spec = project_spec
        super().__init__(f"Invalid PROJECT_SPEC format '{project_spec}'")

class ChrootNotFoundException(CoprException):
    """Raised when no chroot of the project matches the local system."""
    def __init__(self, available_chroots: Iterable[str], chroot: str = ""):
        self.chroot = chroot
        self.available_chroots = sorted(available_chroots)
        if chroot:
            message = f"Chroot not found in the given Copr project ({chroot})."
        else:
            message = "Unable to detect chroot, specify it explicitly."
        lines = [f"{message} You can choose one of the available chroots explicitly:"]
        lines.extend(f" {available}" for available in self.available_chroots)
        super().__init__("\n".join(lines))

class DescriptorFetchException(CoprException):
    """Raised when the repository descriptor cannot be downloaded."""
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch repository descriptor from {url}: {reason}")

class DescriptorParseException(CoprException):
    """Raised when the repository descriptor is not valid JSON or has an unexpected shape."""
    pass

class UnrecognizedDependencyTypeException(CoprException):
    """Raised for dependency types this client does not know how to enable."""
    def __init__(self, dependency_type: str):
        self.dependency_type = dependency_type
        super().__init__(f"Unrecognized dependency type: {dependency_type}")
