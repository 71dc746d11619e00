"""Enumerations used across the composition toolkit."""

from enum import Enum


class DispatchMode(str, Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class RegistrationPolicy(str, Enum):
    MANY = "many"  # Append every registration
    SINGLE = "single"  # Replace the previous recipient


class AssemblyState(str, Enum):
    UNASSEMBLED = "unassembled"
    ASSEMBLING = "assembling"
    ASSEMBLED = "assembled"


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"
