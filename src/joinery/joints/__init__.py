"""Relationship joints: configuration and hooks."""

from joinery.joints.builder import Joint, build_joint
from joinery.joints.config import JointConfig, check_options

__all__ = ["Joint", "JointConfig", "build_joint", "check_options"]
