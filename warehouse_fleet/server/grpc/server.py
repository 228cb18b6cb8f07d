"""Async gRPC server that mirrors the fleet control REST operations."""

from __future__ import annotations

import grpc
from google.protobuf import empty_pb2, struct_pb2

from warehouse_fleet.enterprise.core import SystemState
from warehouse_fleet.server.api.schemas.fleet import SystemStateSchema
from warehouse_fleet.services import FleetController

SERVICE_NAME = "warehousefleet.FleetControl"


def _state_struct(state: SystemState) -> struct_pb2.Struct:
    struct = struct_pb2.Struct()
    struct.update(SystemStateSchema(state=state).model_dump(mode="json"))
    return struct


class FleetControlGrpcService:
    def __init__(self, controller: FleetController) -> None:
        self.controller = controller

    async def GetState(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> struct_pb2.Struct:  # noqa: N802
        return _state_struct(self.controller.state)

    async def Start(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> struct_pb2.Struct:  # noqa: N802
        return _state_struct(await self.controller.start())

    async def Pause(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> struct_pb2.Struct:  # noqa: N802
        return _state_struct(await self.controller.pause())

    async def EmergencyStop(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> struct_pb2.Struct:  # noqa: N802
        return _state_struct(await self.controller.emergency_stop())


class _FleetControlHandler(grpc.GenericRpcHandler):
    def __init__(self, servicer: FleetControlGrpcService) -> None:
        self.servicer = servicer
        self._method_handlers = {
            name: grpc.unary_unary_rpc_method_handler(
                getattr(servicer, name),
                request_deserializer=empty_pb2.Empty.FromString,
                response_serializer=struct_pb2.Struct.SerializeToString,
            )
            for name in ("GetState", "Start", "Pause", "EmergencyStop")
        }

    def service(self, handler_call_details: grpc.HandlerCallDetails):
        service, _, method = handler_call_details.method.lstrip("/").partition("/")
        if service != SERVICE_NAME:
            return None
        return self._method_handlers.get(method)


def create_grpc_server(controller: FleetController, port: int = 50051) -> grpc.aio.Server:
    server = grpc.aio.server()
    handler = _FleetControlHandler(FleetControlGrpcService(controller))
    server.add_generic_rpc_handlers((handler,))
    server.add_insecure_port(f"[::]:{port}")
    return server


async def start_grpc_server(controller: FleetController, port: int = 50051) -> grpc.aio.Server:
    server = create_grpc_server(controller, port)
    await server.start()
    return server
