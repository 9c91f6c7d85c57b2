import uvicorn
import threading
import logging

from fastapi import FastAPI, Body, HTTPException, Request
from fastapi.responses import JSONResponse

from config.config import ConfigHelper
from definitions.loaderState import LoaderState
from definitions.loaderJob import LoaderJob, StopResult
from loader.errors import LoaderError, VolumeBusyError
from loader.worker import LoadWorker
from loader.orchestrator import getContainersForVolume, stopContainersAttachedToVolume, startContainersAttachedToVolume

class Server():
    def __init__(self):
        self.m_logger = logging.getLogger(__name__)
        self.m_thread = None
        self.m_app = FastAPI()

        self.m_config = ConfigHelper()
        self.m_state  = LoaderState()
        self.m_worker = LoadWorker()

        self.addExceptionHandlers()
        self.addRoutes()

        self.m_logger.info('Server initialized')

    def getApp(self) -> FastAPI:
        return self.m_app

    def startServer(self):
        serverConfig = self.m_config.getConfig().server
        uvicornArgs = {'host': serverConfig.host, 'port': serverConfig.port}
        self.m_thread = threading.Thread(target=uvicorn.run, args=[self.m_app], kwargs=uvicornArgs, name='ServerThread', daemon=True)
        self.m_thread.start()

        self.m_logger.info(f'Server thread started on {serverConfig.host}:{serverConfig.port}')
        return self.m_thread

    def addExceptionHandlers(self):
        @self.m_app.exception_handler(LoaderError)
        def handleLoaderError(request: Request, e: LoaderError):
            self.m_logger.error(f'{request.method} {request.url.path} failed: {e}')
            statusCode = 409 if isinstance(e, VolumeBusyError) else 500
            return JSONResponse(status_code=statusCode, content={'detail': str(e)})

    def addRoutes(self):
        @self.m_app.get("/api/config")
        def getConfig():
            return self.m_config.getConfig()

        @self.m_app.get("/api/progress")
        def getProgress() -> dict[str, str]:
            return self.m_state.getProgress()

        @self.m_app.get("/api/volumes/{volume}/lastJob")
        def getLastJob(volume: str) -> LoaderJob:
            job = self.m_state.getLastJob(volume)
            if job is None:
                raise HTTPException(status_code=404, detail=f'no load recorded for volume {volume}')
            return job

        @self.m_app.get("/api/volumes/{volume}/containers")
        def getContainers(volume: str) -> list[str]:
            return getContainersForVolume(volume)

        @self.m_app.post("/api/volumes/{volume}/stop")
        def stopContainers(volume: str) -> StopResult:
            return stopContainersAttachedToVolume(volume)

        @self.m_app.post("/api/containers/start")
        def startContainers(containerNames: list[str] = Body(...)):
            startContainersAttachedToVolume(containerNames)
            return {'started': containerNames}

        @self.m_app.post("/api/volumes/{volume}/load")
        def loadVolume(volume: str, image: str = '') -> LoaderJob:
            if not image:
                raise HTTPException(status_code=400, detail='image is required')

            self.m_logger.info(f'Loading {image} into volume {volume}')
            return self.m_worker.doLoad(volume, image)
