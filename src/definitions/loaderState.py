import threading

from enum import StrEnum

from definitions.loaderJob import LoaderJob

class State(StrEnum):
    IDLE = "IDLE"
    LOAD = "load"

class LoaderState:
    """Per-volume progress of running operations, polled by the server"""
    _instance = None
    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.init()
        return cls._instance

    def init(self):
        self.m_lock = threading.Lock()
        self.m_progress: dict[str, State]     = {}
        self.m_lastJobs: dict[str, LoaderJob] = {}

    def setProgress(self, volume: str, state: State):
        with self.m_lock:
            self.m_progress[volume] = state

    def tryAcquire(self, volume: str, state: State) -> bool:
        """Set the progress of volume unless another operation is running on it"""
        with self.m_lock:
            if volume in self.m_progress:
                return False
            self.m_progress[volume] = state
            return True

    def clearProgress(self, volume: str):
        with self.m_lock:
            self.m_progress.pop(volume, None)

    def getProgress(self) -> dict[str, State]:
        with self.m_lock:
            return dict(self.m_progress)

    def getState(self, volume: str) -> State:
        with self.m_lock:
            return self.m_progress.get(volume, State.IDLE)

    def setLastJob(self, job: LoaderJob):
        with self.m_lock:
            self.m_lastJobs[job.volume] = job

    def getLastJob(self, volume: str) -> LoaderJob|None:
        with self.m_lock:
            return self.m_lastJobs.get(volume)
