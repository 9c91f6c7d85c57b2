from definitions.loaderJob import StopResult

class LoaderError(Exception):
    """Base class for all errors raised while loading a volume"""

class ContainerListError(LoaderError):
    def __init__(self, filters: dict, cause: Exception = None):
        self.filters = filters
        self.cause   = cause
        super().__init__(f"Listing containers with filters {filters} failed: {cause}")

class ContainerOperationError(LoaderError):
    def __init__(self, container: str, step: str, cause: Exception = None):
        self.container = container
        self.step      = step
        self.cause     = cause
        super().__init__(f"Failed to {step} container {container}: {cause}")

class StopContainersError(ContainerOperationError):
    """Raised by the stop orchestrator, carries what was stopped before the failure"""
    def __init__(self, container: str, step: str, cause: Exception, result: StopResult):
        super().__init__(container, step, cause)
        self.result = result

class LoaderExitError(LoaderError):
    def __init__(self, exitCode: int, containerId: str):
        self.exitCode    = exitCode
        self.containerId = containerId
        super().__init__(f"Loader container {containerId} exited with status code {exitCode}")

class VolumeBusyError(LoaderError):
    def __init__(self, volume: str, state: str):
        self.volume = volume
        self.state  = state
        super().__init__(f"Volume {volume} is busy ({state})")
