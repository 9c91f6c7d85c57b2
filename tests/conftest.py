"""
Shared pytest fixtures for the volume loader tests.

The docker SDK client is replaced by FakeEngine, an in-memory model of the
containers the tests need, so orchestration can be checked against real state
transitions instead of call counts only.
"""

import re
import threading
import pytest
from unittest.mock import MagicMock, Mock, patch

from docker.errors import APIError, NotFound

from config.config import ConfigHelper
from dockerHelper.helper import DockerHelper
from definitions.loaderState import LoaderState
from loader.worker import LoadWorker


ENV_VARS = [
    "CONFIG_FILE",
    "STOP_TIMEOUT",
    "LOADER_MOUNT_PATH",
    "LOADER_SOURCE_PATH",
    "STRICT_RESOLVE",
    "MAX_WORKERS",
    "LOG_LEVEL",
    "SERVER_HOST",
    "SERVER_PORT",
]


class FakeEngine:
    """Minimal stand-in for the parts of DockerClient the loader uses."""

    def __init__(self):
        self.containers = {}
        self.lock = threading.Lock()
        self.failStop = set()
        self.failStart = set()
        self.stopCalls = []
        self.startCalls = []
        self.created = []
        self.loaderExitCode = 0
        self.loaderOutput = [b"copied 3 files\n"]
        self.waitResponse = None

        self.client = MagicMock()
        self.client.containers.list.side_effect = self.list
        self.client.containers.create.side_effect = self.create
        self.client.api.start.side_effect = self.start
        self.client.api.stop.side_effect = self.stop
        self.client.api.wait.side_effect = self.wait
        self.client.api.logs.side_effect = self.logs
        self.client.api.remove_container.side_effect = self.remove
        self.client.volumes.list.side_effect = self.listVolumes

    def addContainer(self, name, volumes, running=True):
        self.containers[name] = {"id": f"id-{name}", "volumes": list(volumes), "running": running}

    def isRunning(self, name):
        return self.containers[name]["running"]

    def exists(self, nameOrId):
        return self._find(nameOrId) is not None

    def _find(self, nameOrId):
        for name, c in self.containers.items():
            if nameOrId in (name, c["id"]):
                return name
        return None

    def _get(self, nameOrId):
        name = self._find(nameOrId)
        if name is None:
            raise NotFound(f"No such container: {nameOrId}")
        return name

    def list(self, all=False, filters=None, sparse=False):
        filters = filters or {}
        result = []
        with self.lock:
            for name, c in self.containers.items():
                if not all and not c["running"]:
                    continue
                if "volume" in filters and filters["volume"] not in c["volumes"]:
                    continue
                if "name" in filters and not re.search(filters["name"], f"/{name}"):
                    continue
                result.append(Mock(attrs={"Id": c["id"], "Names": [f"/{name}"]}))
        return result

    def listVolumes(self):
        names = sorted({v for c in self.containers.values() for v in c["volumes"]})
        volumes = []
        for n in names:
            volume = Mock()
            volume.name = n
            volumes.append(volume)
        return volumes

    def start(self, nameOrId):
        name = self._get(nameOrId)
        self.startCalls.append(name)
        if name in self.failStart:
            raise APIError(f"cannot start {name}")
        with self.lock:
            self.containers[name]["running"] = True

    def stop(self, nameOrId, timeout=None):
        name = self._get(nameOrId)
        self.stopCalls.append((name, timeout))
        if name in self.failStop:
            raise APIError(f"cannot stop {name}")
        with self.lock:
            self.containers[name]["running"] = False

    def create(self, image, command=None, volumes=None, detach=True):
        name = f"loader-{len(self.created)}"
        self.created.append({"name": name, "image": image, "command": command, "volumes": volumes, "detach": detach})
        self.addContainer(name, volumes or {}, running=False)
        return Mock(id=self.containers[name]["id"])

    def wait(self, containerId, condition=None):
        name = self._get(containerId)
        with self.lock:
            self.containers[name]["running"] = False
        if self.waitResponse is not None:
            return self.waitResponse
        return {"StatusCode": self.loaderExitCode, "Error": None}

    def logs(self, containerId, stdout=True, stderr=True, stream=False, follow=None):
        self._get(containerId)
        return iter(self.loaderOutput)

    def remove(self, containerId):
        name = self._get(containerId)
        if self.containers[name]["running"]:
            raise APIError(f"cannot remove running container {name}")
        del self.containers[name]


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch):
    """Every test gets fresh singletons and a clean environment."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    singletons = [ConfigHelper, DockerHelper, LoaderState, LoadWorker]
    for cls in singletons:
        cls._instance = None
    yield
    for cls in singletons:
        cls._instance = None


@pytest.fixture
def engine():
    """FakeEngine wired in as the client returned by DockerClient.from_env()."""
    fake = FakeEngine()
    with patch("dockerHelper.helper.DockerClient.from_env", return_value=fake.client):
        yield fake
