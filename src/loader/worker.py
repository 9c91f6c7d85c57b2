import logging
import time

from definitions.loaderJob import LoaderJob, StopResult
from definitions.loaderState import LoaderState, State
from loader.errors import VolumeBusyError
from loader.orchestrator import stopContainersAttachedToVolume, startContainersAttachedToVolume
from loader.volumeLoader import VolumeLoader

class LoadWorker():
    _instance = None
    def __new__(cls, *args, **kwds):
        if cls._instance is None:
            cls._instance = super(LoadWorker, cls).__new__(cls)
            cls._instance.init()
        return cls._instance

    def init(self):
        self.m_logger = logging.getLogger(__name__)

        self.m_volumeLoader = VolumeLoader()
        self.m_state        = LoaderState()

    def doLoad(self, volumeName: str, image: str) -> LoaderJob:
        """Stop the containers using volumeName, load image into it and start them again.

        A failing load leaves the stopped containers stopped.
        """
        if not self.m_state.tryAcquire(volumeName, State.LOAD):
            raise VolumeBusyError(volumeName, self.m_state.getState(volumeName))

        self.m_logger.info(f"Starting load of {image} into volume {volumeName}")
        loadStart = time.time()
        try:
            stopResult: StopResult = stopContainersAttachedToVolume(volumeName)

            job = self.m_volumeLoader.load(volumeName, image)
            self.m_state.setLastJob(job)

            startContainersAttachedToVolume(stopResult.stopped)
        finally:
            self.m_state.clearProgress(volumeName)

        self.m_logger.info(f"Load of volume {volumeName} completed: took {time.time() - loadStart:.2f} seconds")
        return job
