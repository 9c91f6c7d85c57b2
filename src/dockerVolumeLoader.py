import logging

from config.config import ConfigHelper
from dockerHelper.helper import DockerHelper
from loader.orchestrator import getContainersForVolume
from server.server import Server

logging.basicConfig(handlers=[logging.StreamHandler()], format='[%(asctime)s][%(levelname)s][%(name)s] %(message)s', level=logging.INFO)
logger = logging.getLogger(__name__)

def main():
    logger.info(f"######################################################################")
    logger.info(f"Docker Volume Loader service started")
    logger.info(f"######################################################################")

    configHelper = ConfigHelper()
    logging.getLogger().setLevel(configHelper.getConfig().logLevel)

    dockerHelper = DockerHelper()
    server       = Server()

    logger.info(f"Detected volumes")
    for volumeName in dockerHelper.getVolumeNames():
        logger.info(f'  - {volumeName}')
        for containerName in getContainersForVolume(volumeName):
            logger.info(f'    - {containerName}')

    serverThread = server.startServer()
    serverThread.join()

if __name__ == '__main__':
    main()
