from dataclasses import dataclass, field

@dataclass
class StopResult:
    attached: list[str] = field(default_factory=list)
    stopped:  list[str] = field(default_factory=list)

@dataclass
class LoaderJob:
    """Record of one loader container invocation"""
    volume:      str
    image:       str
    mountPath:   str
    sourcePath:  str
    containerId: str|None  = None
    exitCode:    int|None  = None
    output:      list[str] = field(default_factory=list)
    removed:     bool      = False
