"""aixpkg — declarative package reconciler for AIX (rpm, emgr, installp, NIM)."""

__version__ = "0.1.0"
