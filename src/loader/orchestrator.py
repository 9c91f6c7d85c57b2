import logging
import threading

from typing import Callable
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION

from config.config import ConfigHelper
from dockerHelper.helper import DockerHelper
from definitions.loaderJob import StopResult
from loader.errors import ContainerListError, ContainerOperationError, StopContainersError

logger = logging.getLogger(__name__)

def runFailFast(names: list[str], task: Callable[[str, threading.Event], None]) -> None:
    """Run task(name, cancelEvent) for every name in parallel.

    The first failing task sets cancelEvent, pending tasks are cancelled and the
    error is re-raised once the tasks already running have returned. Running
    tasks are expected to check cancelEvent before each engine call.
    """
    if not names:
        return

    cancelEvent = threading.Event()
    maxWorkers  = ConfigHelper().getConfig().maxWorkers
    error       = None

    def runTask(name: str):
        if cancelEvent.is_set():
            return
        try:
            task(name, cancelEvent)
        except Exception:
            # set before the future completes so queued tasks see it
            cancelEvent.set()
            raise

    with ThreadPoolExecutor(max_workers=maxWorkers, thread_name_prefix='VolumeLoader') as executor:
        futures = [executor.submit(runTask, name) for name in names]
        done, notDone = wait(futures, return_when=FIRST_EXCEPTION)

        failed = [f for f in futures if f in done and f.exception() is not None]
        if failed:
            error = failed[0].exception()
            for future in notDone:
                future.cancel()

    if error is not None:
        raise error

def getContainersForVolume(volumeName: str) -> list[str]:
    """Names of all containers, running or not, that mount volumeName.

    A failing engine query is logged and yields an empty list unless strictResolve
    is configured.
    """
    try:
        containers = DockerHelper().listContainers({'volume': volumeName}, all=True)
    except ContainerListError as e:
        if ConfigHelper().getConfig().strictResolve:
            raise
        logger.error(f"Could not list containers for volume {volumeName}: {e}")
        return []

    return [DockerHelper.getContainerName(c) for c in containers]

def stopContainersAttachedToVolume(volumeName: str, timeout: int = None) -> StopResult:
    """Stop the running containers that mount volumeName.

    Only containers that were running and have been stopped are reported in
    StopResult.stopped, these are the ones to start again afterwards.
    """
    if timeout is None:
        timeout = ConfigHelper().getConfig().stopTimeout

    dockerHelper = DockerHelper()
    attached     = getContainersForVolume(volumeName)
    stopped      = []
    stoppedLock  = threading.Lock()

    logger.info(f"Volume {volumeName} is used by {len(attached)} containers: {attached}")

    def stopContainer(containerName: str, cancelEvent: threading.Event):
        if cancelEvent.is_set():
            return

        # only a running container can hold the volume busy
        try:
            running = dockerHelper.isContainerRunning(containerName)
        except ContainerListError as e:
            raise ContainerOperationError(containerName, 'check status of', e.cause) from e

        if not running:
            logger.info(f"container {containerName} is not running, no need to stop it")
            return

        if cancelEvent.is_set():
            return

        logger.info(f"stopping container {containerName}...")
        dockerHelper.stopContainer(containerName, timeout)
        logger.info(f"container {containerName} stopped")

        with stoppedLock:
            stopped.append(containerName)

    try:
        runFailFast(attached, stopContainer)
    except ContainerOperationError as e:
        with stoppedLock:
            result = StopResult(attached=attached, stopped=list(stopped))
        logger.error(f"Stopping containers of volume {volumeName} failed: {e}. Stopped so far: {result.stopped}")
        raise StopContainersError(e.container, e.step, e.cause, result) from e

    logger.info(f"{len(stopped)} containers have been stopped")
    return StopResult(attached=attached, stopped=stopped)

def startContainersAttachedToVolume(containerNames: list[str]) -> None:
    dockerHelper = DockerHelper()

    def startContainer(containerName: str, cancelEvent: threading.Event):
        if cancelEvent.is_set():
            return

        logger.info(f"starting container {containerName}...")
        dockerHelper.startContainer(containerName)
        logger.info(f"container {containerName} started")

    try:
        runFailFast(containerNames, startContainer)
    except ContainerOperationError as e:
        logger.error(f"Starting containers {containerNames} failed: {e}")
        raise

    logger.info(f"{len(containerNames)} containers have been started")
