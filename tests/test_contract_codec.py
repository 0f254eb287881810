"""
Tests for descriptor-driven contract encoding and decoding.
"""
import base58
import pytest
from google.protobuf import descriptor_pb2

from tomorrowdao_skill.chain.contract import ContractInterface, ContractMethod
from tomorrowdao_skill.exceptions import ChainError, InputError

from tests.test_helpers.mock_chain import (
    OWNER_ADDRESS,
    SPENDER_ADDRESS,
    TEST_CONTRACT,
    allowance_output_hex,
    build_core_file,
    build_descriptor_set,
    build_token_file,
    proposal_contract,
    token_contract,
)

HASH_HEX = "ab" * 32


@pytest.fixture
def contract():
    return token_contract()


class TestContractInterface:
    """Test method table construction"""

    def test_methods_listed(self, contract):
        assert contract.address == TEST_CONTRACT
        assert set(contract) == {"GetAllowance", "Transfer", "Approve", "GetMembers", "SetMembers"}
        assert len(contract) == 5
        assert "Transfer" in contract

    def test_method_not_found(self, contract):
        with pytest.raises(ChainError) as exc_info:
            contract.method("Burn")
        assert exc_info.value.code == "METHOD_NOT_FOUND"

    def test_method_carries_contract_address(self, contract):
        method = contract.method("Transfer")
        assert method.contract_address == TEST_CONTRACT
        assert method.name == "Transfer"

    def test_missing_dependency(self):
        data = build_descriptor_set(build_token_file())

        with pytest.raises(ChainError) as exc_info:
            ContractInterface.from_descriptor_set(TEST_CONTRACT, data)
        assert exc_info.value.code == "CONTRACT_DESCRIPTOR_ERROR"

    def test_garbage_descriptor(self):
        with pytest.raises(ChainError) as exc_info:
            ContractInterface.from_descriptor_set(TEST_CONTRACT, b"\xff\xff\xff")
        assert exc_info.value.code == "CONTRACT_DESCRIPTOR_ERROR"

    def test_files_in_any_order(self):
        data = build_descriptor_set(build_token_file(), build_core_file())
        assert "GetAllowance" in ContractInterface.from_descriptor_set(TEST_CONTRACT, data)

    def test_file_without_services(self):
        empty = descriptor_pb2.FileDescriptorProto(name="x.proto", package="x", syntax="proto3")
        assert len(ContractInterface.from_descriptor_set(TEST_CONTRACT, build_descriptor_set(empty))) == 0


class TestEncodeInput:
    """Test JSON to protobuf encoding"""

    def test_addresses_as_base58(self, contract):
        method = contract.method("GetAllowance")
        encoded = method.encode_input({"symbol": "ELF", "owner": OWNER_ADDRESS, "spender": SPENDER_ADDRESS})

        decoded = method.input_type.FromString(encoded)

        assert decoded.symbol == "ELF"
        assert decoded.owner.value == base58.b58decode_check(OWNER_ADDRESS)
        assert decoded.spender.value == base58.b58decode_check(SPENDER_ADDRESS)

    def test_top_level_hash(self, contract):
        method = contract.method("Approve")

        decoded = method.input_type.FromString(method.encode_input("0x" + HASH_HEX))

        assert decoded.value == bytes.fromhex(HASH_HEX)

    def test_repeated_addresses_and_snake_case_keys(self, contract):
        method = contract.method("SetMembers")
        encoded = method.encode_input({
            "organization_members": [OWNER_ADDRESS, SPENDER_ADDRESS],
            "proposalId": HASH_HEX,
        })

        decoded = method.input_type.FromString(encoded)

        assert [m.value for m in decoded.organization_members] == [
            base58.b58decode_check(OWNER_ADDRESS),
            base58.b58decode_check(SPENDER_ADDRESS),
        ]
        assert decoded.proposal_id.value == bytes.fromhex(HASH_HEX)

    def test_unknown_fields_ignored(self, contract):
        method = contract.method("Transfer")
        decoded = method.input_type.FromString(
            method.encode_input({"to": OWNER_ADDRESS, "symbol": "ELF", "amount": "5", "extra": 1})
        )
        assert decoded.amount == 5

    def test_none_args_encode_empty_message(self, contract):
        assert contract.method("Transfer").encode_input(None) == b""

    @pytest.mark.parametrize("args", [
        {"to": "not-an-address"},
        {"to": OWNER_ADDRESS[:-1] + ("1" if OWNER_ADDRESS[-1] != "1" else "2")},
        {"amount": "many"},
    ])
    def test_invalid_args(self, contract, args):
        with pytest.raises(InputError) as exc_info:
            contract.method("Transfer").encode_input(args)
        assert exc_info.value.code == "INVALID_INPUT"

    def test_bad_hash_hex(self, contract):
        with pytest.raises(InputError):
            contract.method("Approve").encode_input("zz")

    def test_pack_unsupported(self):
        method = ContractMethod(contract_address=TEST_CONTRACT, name="Opaque", input_type=None, output_type=None)

        with pytest.raises(ChainError) as exc_info:
            method.encode_input({})
        assert exc_info.value.code == "PACK_INPUT_UNSUPPORTED"


class TestDecodeOutput:
    """Test protobuf to JSON decoding"""

    def test_allowance_output(self, contract):
        output = contract.method("GetAllowance").decode_output(bytes.fromhex(allowance_output_hex(250)))

        assert output == {
            "symbol": "ELF",
            "owner": OWNER_ADDRESS,
            "spender": SPENDER_ADDRESS,
            "allowance": "250",
        }

    def test_empty_output(self, contract):
        assert contract.method("Transfer").decode_output(b"") == {}

    def test_repeated_and_hash_output(self, contract):
        method = contract.method("GetMembers")
        message = method.output_type()
        message.organization_members.add().value = base58.b58decode_check(OWNER_ADDRESS)
        message.proposal_id.value = bytes.fromhex(HASH_HEX)

        output = method.decode_output(message.SerializeToString())

        assert output == {"organizationMembers": [OWNER_ADDRESS], "proposalId": HASH_HEX}

    def test_truncated_output(self, contract):
        with pytest.raises(ChainError) as exc_info:
            contract.method("GetAllowance").decode_output(b"\x0a\x05EL")
        assert exc_info.value.code == "CONTRACT_VIEW_ERROR"

    def test_unknown_output_type_returns_hex(self):
        method = ContractMethod(contract_address=TEST_CONTRACT, name="Raw", input_type=None, output_type=None)
        assert method.decode_output(b"\x01\x02") == "0102"


class TestNestedMessages:
    """Test nested message fields with any protobuf runtime"""

    def test_singular_message_fields(self, contract):
        method = contract.method("Transfer")

        decoded = method.input_type.FromString(method.encode_input({"to": OWNER_ADDRESS, "amount": 1}))

        assert decoded.to.value == base58.b58decode_check(OWNER_ADDRESS)

    def test_list_for_singular_message_is_invalid(self, contract):
        with pytest.raises(InputError) as exc_info:
            contract.method("Transfer").encode_input({"to": [OWNER_ADDRESS]})
        assert exc_info.value.code == "INVALID_INPUT"


class TestTimestampFields:
    """Test Timestamp and Duration fields carried as {seconds, nanos}"""

    @pytest.fixture
    def proposals(self):
        return proposal_contract()

    def test_encode_seconds_nanos(self, proposals):
        method = proposals.method("CreateProposal")
        encoded = method.encode_input({
            "contractMethodName": "Transfer",
            "toAddress": OWNER_ADDRESS,
            "expiredTime": {"seconds": 1700000000, "nanos": 0},
            "votingPeriod": {"seconds": "3600", "nanos": 500},
        })

        decoded = method.input_type.FromString(encoded)

        assert decoded.expired_time.seconds == 1700000000
        assert decoded.expired_time.nanos == 0
        assert decoded.voting_period.seconds == 3600
        assert decoded.voting_period.nanos == 500

    def test_rfc3339_string_still_accepted(self, proposals):
        method = proposals.method("CreateProposal")

        decoded = method.input_type.FromString(method.encode_input({"expiredTime": "2023-11-14T22:13:20Z"}))

        assert decoded.expired_time.seconds == 1700000000

    @pytest.mark.parametrize("expired_time", [
        {"seconds": "soon"},
        {"seconds": 1, "millis": 2},
    ])
    def test_invalid_timestamp(self, proposals, expired_time):
        with pytest.raises(InputError) as exc_info:
            proposals.method("CreateProposal").encode_input({"expiredTime": expired_time})
        assert exc_info.value.code == "INVALID_INPUT"

    def test_decode_as_seconds_nanos(self, proposals):
        method = proposals.method("GetProposal")
        message = method.output_type(contract_method_name="Transfer")
        message.expired_time.seconds = 1700000000
        message.expired_time.nanos = 250000000
        message.voting_period.seconds = 60

        output = method.decode_output(message.SerializeToString())

        assert output == {
            "contractMethodName": "Transfer",
            "expiredTime": {"seconds": 1700000000, "nanos": 250000000},
            "votingPeriod": {"seconds": 60, "nanos": 0},
        }

    def test_encoded_input_decodes_back(self, proposals):
        args = {
            "contractMethodName": "Transfer",
            "toAddress": OWNER_ADDRESS,
            "expiredTime": {"seconds": 1700000000, "nanos": 0},
        }
        encoded = proposals.method("CreateProposal").encode_input(args)

        assert proposals.method("GetProposal").decode_output(encoded) == args
