"""
Contract method tables built from protobuf descriptors.

An aelf node publishes each contract's interface as a protobuf
FileDescriptorSet. ``ContractInterface`` turns it into an explicit
``method_name -> ContractMethod`` table; each ``ContractMethod`` knows how to
encode JSON arguments and decode outputs. aelf ``Address`` values travel as
base58check strings and ``Hash`` values as hex strings on the JSON side.
"""
import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Set, Type

import base58
from google.protobuf import descriptor_pb2, descriptor_pool, json_format, message, message_factory
from google.protobuf.descriptor import Descriptor, FieldDescriptor

# Register the well-known types so contract descriptors may depend on them
from google.protobuf import (  # noqa: F401
    any_pb2,
    duration_pb2,
    empty_pb2,
    struct_pb2,
    timestamp_pb2,
    wrappers_pb2,
)

from ..exceptions import ChainError, ErrorCode, InputError

logger = logging.getLogger(__name__)

ADDRESS_TYPE = "aelf.Address"
HASH_TYPE = "aelf.Hash"

# Carried as {"seconds", "nanos"} objects on the JSON side
_SECONDS_NANOS_TYPES = {
    timestamp_pb2.Timestamp.DESCRIPTOR.full_name: timestamp_pb2.Timestamp,
    duration_pb2.Duration.DESCRIPTOR.full_name: duration_pb2.Duration,
}


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def _seconds_nanos_to_string(message_type, value: Dict[str, Any]) -> str:
    """{"seconds": 1700000000, "nanos": 0} -> "2023-11-14T22:13:20Z" (or "1700000000s" for Duration)"""
    unknown = set(value) - {"seconds", "nanos"}
    if unknown:
        raise ValueError(f"unexpected keys for {message_type.DESCRIPTOR.full_name}: {', '.join(sorted(unknown))}")
    return message_type(
        seconds=int(value.get("seconds", 0)),
        nanos=int(value.get("nanos", 0)),
    ).ToJsonString()


def _string_to_seconds_nanos(message_type, value: str) -> Dict[str, int]:
    parsed = message_type()
    parsed.FromJsonString(value)
    return {"seconds": parsed.seconds, "nanos": parsed.nanos}


def _is_map(field: FieldDescriptor) -> bool:
    return field.message_type is not None and field.message_type.GetOptions().map_entry


def _fields_by_key(descriptor: Descriptor) -> Dict[str, FieldDescriptor]:
    fields = {}
    for field in descriptor.fields:
        fields[field.name] = field
        fields[field.json_name] = field
    return fields


def _to_proto_json(descriptor: Descriptor, value: Any) -> Any:
    """Rewrite caller JSON into the form json_format.ParseDict expects"""
    if descriptor.full_name == ADDRESS_TYPE and isinstance(value, str):
        return {"value": base64.b64encode(base58.b58decode_check(value)).decode("ascii")}
    if descriptor.full_name == HASH_TYPE and isinstance(value, str):
        return {"value": base64.b64encode(bytes.fromhex(_strip_0x(value))).decode("ascii")}
    if descriptor.full_name in _SECONDS_NANOS_TYPES and isinstance(value, dict):
        return _seconds_nanos_to_string(_SECONDS_NANOS_TYPES[descriptor.full_name], value)
    if not isinstance(value, dict):
        return value

    fields = _fields_by_key(descriptor)
    out = {}
    for key, item in value.items():
        field = fields.get(key)
        if field is None or field.message_type is None:
            out[key] = item
        elif _is_map(field):
            value_type = field.message_type.fields_by_name["value"].message_type
            if value_type is not None and isinstance(item, dict):
                out[key] = {k: _to_proto_json(value_type, v) for k, v in item.items()}
            else:
                out[key] = item
        elif isinstance(item, list):
            # Only repeated fields take a JSON list; ParseDict rejects it anywhere else
            out[key] = [_to_proto_json(field.message_type, v) for v in item]
        else:
            out[key] = _to_proto_json(field.message_type, item)
    return out


def _from_proto_json(descriptor: Descriptor, value: Any) -> Any:
    """Rewrite MessageToDict output so addresses and hashes read naturally"""
    if descriptor.full_name == ADDRESS_TYPE and isinstance(value, dict):
        raw = base64.b64decode(value.get("value", ""))
        return base58.b58encode_check(raw).decode("ascii") if raw else ""
    if descriptor.full_name == HASH_TYPE and isinstance(value, dict):
        return base64.b64decode(value.get("value", "")).hex()
    if descriptor.full_name in _SECONDS_NANOS_TYPES and isinstance(value, str):
        return _string_to_seconds_nanos(_SECONDS_NANOS_TYPES[descriptor.full_name], value)
    if not isinstance(value, dict):
        return value

    fields = _fields_by_key(descriptor)
    out = {}
    for key, item in value.items():
        field = fields.get(key)
        if field is None or field.message_type is None:
            out[key] = item
        elif _is_map(field):
            value_type = field.message_type.fields_by_name["value"].message_type
            if value_type is not None and isinstance(item, dict):
                out[key] = {k: _from_proto_json(value_type, v) for k, v in item.items()}
            else:
                out[key] = item
        elif isinstance(item, list):
            out[key] = [_from_proto_json(field.message_type, v) for v in item]
        else:
            out[key] = _from_proto_json(field.message_type, item)
    return out


@dataclass(frozen=True)
class ContractMethod:
    """
    Typed invocation descriptor for one contract method.

    Attributes:
        contract_address: Address of the contract exposing the method
        name: Method name as declared in the contract service
        input_type: Message class of the request (None if it cannot be built)
        output_type: Message class of the response
    """
    contract_address: str
    name: str
    input_type: Optional[Type[message.Message]]
    output_type: Optional[Type[message.Message]]

    def encode_input(self, args: Any) -> bytes:
        """
        Encode JSON arguments into the method's protobuf input.

        Raises:
            ChainError: PACK_INPUT_UNSUPPORTED if the input type is unknown
            InputError: INVALID_INPUT if the arguments do not fit the input type
        """
        if self.input_type is None:
            raise ChainError(
                ErrorCode.PACK_INPUT_UNSUPPORTED,
                f"method {self.name} does not expose an input encoder",
            )
        request = self.input_type()
        prepared = {} if args is None else args
        try:
            json_format.ParseDict(
                _to_proto_json(request.DESCRIPTOR, prepared),
                request,
                ignore_unknown_fields=True,
            )
        except (json_format.ParseError, ValueError, TypeError) as e:
            raise InputError(
                ErrorCode.INVALID_INPUT,
                f"invalid args for {self.name}: {e}",
            )
        return request.SerializeToString()

    def decode_output(self, data: bytes) -> Any:
        """Decode the method's protobuf output into JSON"""
        if self.output_type is None:
            return data.hex()
        response = self.output_type()
        try:
            response.ParseFromString(data)
        except message.DecodeError as e:
            raise ChainError(ErrorCode.CONTRACT_VIEW_ERROR, f"cannot decode output of {self.name}: {e}")
        return _from_proto_json(response.DESCRIPTOR, json_format.MessageToDict(response))


class ContractInterface:
    """Method lookup table for one contract"""

    def __init__(self, address: str, methods: Dict[str, ContractMethod]):
        self.address = address
        self._methods = dict(methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __contains__(self, method_name: object) -> bool:
        return method_name in self._methods

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def method(self, method_name: str) -> ContractMethod:
        """
        Look up a method by name.

        Raises:
            ChainError: METHOD_NOT_FOUND if the contract does not declare it
        """
        method = self._methods.get(method_name)
        if method is None:
            raise ChainError(ErrorCode.METHOD_NOT_FOUND, f"method {method_name} not found on contract")
        return method

    @classmethod
    def from_descriptor_set(cls, address: str, data: bytes) -> "ContractInterface":
        """
        Build the method table from a serialized FileDescriptorSet.

        Args:
            address: Contract address the descriptors belong to
            data: Serialized google.protobuf.FileDescriptorSet

        Raises:
            ChainError: CONTRACT_DESCRIPTOR_ERROR if the descriptors cannot be loaded
        """
        descriptor_set = descriptor_pb2.FileDescriptorSet()
        try:
            descriptor_set.ParseFromString(data)
            pool = _load_pool(descriptor_set)
        except (message.DecodeError, TypeError, KeyError, ValueError) as e:
            raise ChainError(
                ErrorCode.CONTRACT_DESCRIPTOR_ERROR,
                f"cannot load contract descriptors for {address}: {e}",
            )

        methods: Dict[str, ContractMethod] = {}
        for file_proto in descriptor_set.file:
            for service in file_proto.service:
                full_name = f"{file_proto.package}.{service.name}" if file_proto.package else service.name
                for method in pool.FindServiceByName(full_name).methods:
                    methods[method.name] = ContractMethod(
                        contract_address=address,
                        name=method.name,
                        input_type=_message_class(method.input_type),
                        output_type=_message_class(method.output_type),
                    )
        return cls(address, methods)


def _message_class(descriptor: Optional[Descriptor]) -> Optional[Type[message.Message]]:
    if descriptor is None:
        return None
    return message_factory.GetMessageClass(descriptor)


def _load_pool(descriptor_set: descriptor_pb2.FileDescriptorSet) -> descriptor_pool.DescriptorPool:
    """Add every file to a fresh pool, dependencies first"""
    pool = descriptor_pool.DescriptorPool()
    files = {f.name: f for f in descriptor_set.file}
    added: Set[str] = set()

    def add(name: str) -> None:
        if name in added:
            return
        added.add(name)
        file_proto = files.get(name)
        if file_proto is None:
            # Not shipped by the node; fall back to the well-known types
            known = descriptor_pool.Default().FindFileByName(name)
            for dependency in known.dependencies:
                add(dependency.name)
            pool.AddSerializedFile(known.serialized_pb)
            return
        for dependency in file_proto.dependency:
            add(dependency)
        pool.AddSerializedFile(file_proto.SerializeToString())

    for file_proto in descriptor_set.file:
        add(file_proto.name)
    return pool
