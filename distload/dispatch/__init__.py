"""Dispatching jobs to the current and to new workers."""

from .dispatcher import Dispatcher
from .executors import Executor, SimulatedExecutor, CommandExecutor
from .invokers import Invoker, HttpInvoker, LocalInvoker

__all__ = [
    "Dispatcher",
    "Executor",
    "SimulatedExecutor",
    "CommandExecutor",
    "Invoker",
    "HttpInvoker",
    "LocalInvoker",
]
