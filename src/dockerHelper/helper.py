import re
import logging

from typing import Iterator

from docker import DockerClient
from docker.errors import DockerException
from requests.exceptions import RequestException
from docker.models.containers import Container

from loader.errors import ContainerListError, ContainerOperationError

# docker-py lets connection failures through as requests errors
ENGINE_ERRORS = (DockerException, RequestException)

class DockerHelper:
    """Thin facade over the docker SDK, keyed by container name or id.

    Every SDK failure is re-raised as a LoaderError naming the container and the
    step that failed.
    """
    _instance = None
    def __new__(cls, *args, **kwds):
        if cls._instance is None:
            cls._instance = super(DockerHelper, cls).__new__(cls)
            cls._instance.init()
        return cls._instance

    def init(self):
        self.m_logger = logging.getLogger(__name__)
        self.m_client = DockerClient.from_env()

    @staticmethod
    def getContainerName(container: Container) -> str:
        names = container.attrs.get('Names')
        if names:
            return names[0].removeprefix('/')
        return container.name

    def getVolumeNames(self) -> list[str]:
        return [v.name for v in self.m_client.volumes.list()]

    def listContainers(self, filters: dict, all: bool = False) -> list[Container]:
        try:
            return self.m_client.containers.list(all=all, filters=filters, sparse=True)
        except ENGINE_ERRORS as e:
            raise ContainerListError(filters, e) from e

    def isContainerRunning(self, name: str) -> bool:
        # the name filter is a regex on the "/"-prefixed name
        containers = self.listContainers({'name': f'^/{re.escape(name)}$'})
        if len(containers) > 1:
            self.m_logger.warning(f"Found {len(containers)} running containers for name {name}")
        return len(containers) == 1

    def startContainer(self, name: str):
        try:
            self.m_client.api.start(name)
        except ENGINE_ERRORS as e:
            raise ContainerOperationError(name, 'start', e) from e

    def stopContainer(self, name: str, timeout: int):
        try:
            self.m_client.api.stop(name, timeout=timeout)
        except ENGINE_ERRORS as e:
            raise ContainerOperationError(name, 'stop', e) from e

    def createContainer(self, image: str, command: list[str], volumes: dict) -> str:
        try:
            container = self.m_client.containers.create(image, command=command, volumes=volumes, detach=False)
        except ENGINE_ERRORS as e:
            raise ContainerOperationError(image, 'create', e) from e
        return container.id

    def waitContainer(self, containerId: str) -> int:
        try:
            status = self.m_client.api.wait(containerId, condition='not-running')
        except ENGINE_ERRORS as e:
            raise ContainerOperationError(containerId, 'wait for', e) from e

        error = status.get('Error')
        if error and error.get('Message'):
            raise ContainerOperationError(containerId, 'wait for', error.get('Message'))
        return status.get('StatusCode')

    def getLogs(self, containerId: str) -> Iterator[bytes]:
        try:
            return self.m_client.api.logs(containerId, stdout=True, stderr=True, stream=True, follow=False)
        except ENGINE_ERRORS as e:
            raise ContainerOperationError(containerId, 'fetch logs of', e) from e

    def removeContainer(self, containerId: str):
        try:
            self.m_client.api.remove_container(containerId)
        except ENGINE_ERRORS as e:
            raise ContainerOperationError(containerId, 'remove', e) from e
