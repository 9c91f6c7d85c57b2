import logging
import time

from config.config import ConfigHelper
from dockerHelper.helper import DockerHelper, ENGINE_ERRORS
from definitions.loaderJob import LoaderJob
from loader.errors import ContainerOperationError, LoaderExitError

class VolumeLoader:
    """Replaces the content of a volume with the content baked into an image.

    The image is expected to carry the data below the configured source path.
    A throwaway container mounting the volume wipes it and copies the data over.
    """

    def __init__(self):
        self.m_logger       = logging.getLogger(__name__)
        self.m_dockerHelper = DockerHelper()
        self.m_config       = ConfigHelper().getConfig()

    def getLoadCommand(self) -> list[str]:
        mountPath  = self.m_config.mountPath
        sourcePath = self.m_config.sourcePath
        # ..?* matches dot-dot files except '..', .[!.]* matches dot files except '.'
        script = f"rm -rf {mountPath}/..?* {mountPath}/.[!.]* {mountPath}/* && cp -Rp {sourcePath}/. {mountPath}/;"
        return ["/bin/sh", "-c", script]

    def load(self, volumeName: str, image: str) -> LoaderJob:
        job = LoaderJob(
            volume=volumeName,
            image=image,
            mountPath=self.m_config.mountPath,
            sourcePath=self.m_config.sourcePath
        )
        self.m_logger.info(f"Loading image {image} into volume {volumeName}")
        loadStart = time.time()

        job.containerId = self.m_dockerHelper.createContainer(
            image,
            command=self.getLoadCommand(),
            volumes={volumeName: {'bind': job.mountPath, 'mode': 'rw'}}
        )
        self.m_logger.info(f"Loader container {job.containerId} created")

        self.m_dockerHelper.startContainer(job.containerId)

        job.exitCode = self.m_dockerHelper.waitContainer(job.containerId)
        self.m_logger.info(f"Loader container {job.containerId} exited with status code {job.exitCode}")

        job.output = self.collectOutput(job.containerId)

        if job.exitCode != 0:
            # the container is kept for inspection
            self.m_logger.error(f"Loading {image} into {volumeName} failed, container {job.containerId} was not removed")
            raise LoaderExitError(job.exitCode, job.containerId)

        self.m_dockerHelper.removeContainer(job.containerId)
        job.removed = True

        self.m_logger.info(f"Volume {volumeName} loaded from {image}: took {time.time() - loadStart:.2f} seconds")
        return job

    def collectOutput(self, containerId: str) -> list[str]:
        output = b''
        try:
            for chunk in self.m_dockerHelper.getLogs(containerId):
                output += chunk
        except ENGINE_ERRORS as e:
            raise ContainerOperationError(containerId, 'fetch logs of', e) from e

        lines = output.decode('utf-8', errors='replace').splitlines()
        for line in lines:
            self.m_logger.info(f"[{containerId[:12]}] {line}")
        return lines
