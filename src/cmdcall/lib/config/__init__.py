"""Configuration loading."""

from cmdcall.lib.config.settings import CmdcallConfig, load_config

__all__ = ["CmdcallConfig", "load_config"]
