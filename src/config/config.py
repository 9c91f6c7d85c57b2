import os
import json
import logging

from pathlib import Path
from dacite import from_dict, Config

from definitions.loaderConfig import LoaderConfig

class ConfigHelper():
    _instance = None
    def __new__(cls, *args, **kwds):
        if cls._instance is None:
            cls._instance = super(ConfigHelper, cls).__new__(cls)
            cls._instance.init()
        return cls._instance

    def init(self):
        self.m_logger = logging.getLogger(__name__)
        self.m_config = LoaderConfig()

        self.loadConfigFromFile()
        self.loadConfigFromEnv()

        self.m_logger.info(f'Loaded config: {self.m_config}')

    def loadConfigFromFile(self):
        configFileFromEnv = os.getenv('CONFIG_FILE')
        if configFileFromEnv is None:
            return

        configPath = Path(configFileFromEnv)
        if not configPath.exists():
            self.m_logger.warning(f'Config file {configPath} does not exist, using defaults')
            return

        configDict = json.loads(configPath.read_text())
        self.m_config = from_dict(data_class=LoaderConfig, data=configDict, config=Config(strict=True))
        self.m_logger.info(f'Config file {configPath} loaded')

    def loadConfigFromEnv(self):
        stopTimeoutFromEnv   = os.getenv('STOP_TIMEOUT')
        mountPathFromEnv     = os.getenv('LOADER_MOUNT_PATH')
        sourcePathFromEnv    = os.getenv('LOADER_SOURCE_PATH')
        strictResolveFromEnv = os.getenv('STRICT_RESOLVE')
        maxWorkersFromEnv    = os.getenv('MAX_WORKERS')
        logLevelFromEnv      = os.getenv('LOG_LEVEL')

        if stopTimeoutFromEnv is not None:
            self.m_config.stopTimeout = int(stopTimeoutFromEnv)

        if mountPathFromEnv is not None:
            self.m_config.mountPath = mountPathFromEnv.rstrip('/')

        if sourcePathFromEnv is not None:
            self.m_config.sourcePath = sourcePathFromEnv.rstrip('/')

        if strictResolveFromEnv is not None:
            self.m_config.strictResolve = strictResolveFromEnv.lower() == 'true'

        if maxWorkersFromEnv is not None:
            self.m_config.maxWorkers = int(maxWorkersFromEnv)

        if logLevelFromEnv is not None:
            self.m_config.logLevel = logLevelFromEnv.upper()

        serverHostFromEnv = os.getenv('SERVER_HOST')
        serverPortFromEnv = os.getenv('SERVER_PORT')

        if serverHostFromEnv is not None:
            self.m_config.server.host = serverHostFromEnv

        if serverPortFromEnv is not None:
            self.m_config.server.port = int(serverPortFromEnv)

    def getConfig(self) -> LoaderConfig:
        return self.m_config
