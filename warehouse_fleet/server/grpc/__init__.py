"""Minimal gRPC service exposing fleet controls."""

from __future__ import annotations

from .server import create_grpc_server, start_grpc_server

__all__ = ["create_grpc_server", "start_grpc_server"]
