from dataclasses import dataclass, field

@dataclass
class ServerConfig:
    host: str = '0.0.0.0'
    port: int = 80

@dataclass
class LoaderConfig:
    stopTimeout:   int        = 10
    mountPath:     str        = '/mount-volume'
    sourcePath:    str        = '/volume-data'
    strictResolve: bool       = False
    maxWorkers:    int|None   = None
    logLevel:      str        = 'INFO'
    server: ServerConfig      = field(default_factory=ServerConfig)
