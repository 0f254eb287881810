"""
aelf transaction construction and signing.

The ``Transaction`` message is declared in code (only field numbers and wire
types matter to the node), so no generated ``_pb2`` module is required.
"""
import hashlib
from typing import Any, Dict, Union

import base58
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from ..signing import sign_digest_bytes

_PACKAGE = "tomorrowdao_skill.aelf"

# (name, number, type, type_name)
_TRANSACTION_FIELDS = (
    ("from_address", 1, descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE, f".{_PACKAGE}.Address"),
    ("to_address", 2, descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE, f".{_PACKAGE}.Address"),
    ("ref_block_number", 3, descriptor_pb2.FieldDescriptorProto.TYPE_INT64, None),
    ("ref_block_prefix", 4, descriptor_pb2.FieldDescriptorProto.TYPE_BYTES, None),
    ("method_name", 5, descriptor_pb2.FieldDescriptorProto.TYPE_STRING, None),
    ("params", 6, descriptor_pb2.FieldDescriptorProto.TYPE_BYTES, None),
    ("signature", 10000, descriptor_pb2.FieldDescriptorProto.TYPE_BYTES, None),
)


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="tomorrowdao_skill/aelf_transaction.proto",
        package=_PACKAGE,
        syntax="proto3",
    )
    address = file_proto.message_type.add(name="Address")
    address.field.add(
        name="value",
        number=1,
        type=descriptor_pb2.FieldDescriptorProto.TYPE_BYTES,
        label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
    )
    transaction = file_proto.message_type.add(name="Transaction")
    for name, number, field_type, type_name in _TRANSACTION_FIELDS:
        field = transaction.field.add(
            name=name,
            number=number,
            type=field_type,
            label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
        )
        if type_name:
            field.type_name = type_name
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())

Address = message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{_PACKAGE}.Address"))
Transaction = message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{_PACKAGE}.Transaction"))


def build_transaction(from_address: str, to_address: str, method_name: str, params: bytes,
                      chain_status: Dict[str, Any]) -> Any:
    """
    Build an unsigned transaction referencing the node's best block.

    Args:
        from_address: base58 sender address
        to_address: base58 contract address
        method_name: Contract method to invoke
        params: Protobuf-encoded method input
        chain_status: Response of the node's chainStatus endpoint

    Returns:
        Transaction message
    """
    return Transaction(
        from_address=Address(value=base58.b58decode_check(from_address)),
        to_address=Address(value=base58.b58decode_check(to_address)),
        ref_block_number=int(chain_status["BestChainHeight"]),
        ref_block_prefix=bytes.fromhex(chain_status["BestChainHash"])[:4],
        method_name=method_name,
        params=params,
    )


def sign_transaction(transaction: Any, private_key: Union[str, bytes]) -> Any:
    """Sign sha256 of the serialized transaction (signature field empty) in place"""
    transaction.ClearField("signature")
    digest = hashlib.sha256(transaction.SerializeToString()).digest()
    transaction.signature = sign_digest_bytes(private_key, digest)
    return transaction


def transaction_id(transaction: Any) -> str:
    """Transaction id as computed by the node: sha256 of the unsigned bytes"""
    unsigned = Transaction()
    unsigned.CopyFrom(transaction)
    unsigned.ClearField("signature")
    return hashlib.sha256(unsigned.SerializeToString()).hexdigest()


def to_raw_transaction(transaction: Any) -> str:
    """Hex encoding accepted by the node's RawTransaction field"""
    return transaction.SerializeToString().hex()
