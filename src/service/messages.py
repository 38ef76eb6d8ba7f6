"""
Runtime-loaded protobuf messages and gRPC service stubs.

``ccxt_service.proto`` is compiled on import through ``grpc.protos_and_services``
(backed by grpcio-tools), so there is no generated code to keep in sync.

    from src.service.messages import pb, pb_grpc

    request = pb.SymbolRequest(config=pb.ExchangeConfig(exchange="binance"), symbol="BTC/USDT")
"""

import sys
from pathlib import Path

import grpc

PROTO_DIR = Path(__file__).resolve().parent / "protos"
PROTO_FILE = "ccxt_service.proto"

# protoc resolves imports against sys.path
if str(PROTO_DIR) not in sys.path:
    sys.path.insert(0, str(PROTO_DIR))

pb, pb_grpc = grpc.protos_and_services(PROTO_FILE)
