"""
Tests for the network governance domain operations.
"""
from unittest.mock import patch

import pytest

from tomorrowdao_skill.config import CONTRACTS
from tomorrowdao_skill.domains import network
from tomorrowdao_skill.exceptions import ChainError, ErrorCode, InputError

from tests.test_helpers.mock_chain import TEST_API_BASE, TEST_AUTH_BASE, TEST_PRIV_KEY

AELF = CONTRACTS["network"]["AELF"]
PROPOSAL_ID = "cd" * 32


def _org_args(min_approval, max_rejection, max_abstention, min_vote, members=None):
    args = {
        "proposalReleaseThreshold": {
            "minimalApprovalThreshold": min_approval,
            "maximalRejectionThreshold": max_rejection,
            "maximalAbstentionThreshold": max_abstention,
            "minimalVoteThreshold": min_vote,
        },
    }
    if members is not None:
        args["organizationMemberList"] = {"organizationMembers": members}
    return args


class TestProposals:
    """Test governance proposal writes"""

    @pytest.mark.parametrize("proposal_type,contract", [
        ("Parliament", "parliament"), ("Association", "association"), ("Referendum", "referendum"),
    ])
    def test_create_routes_to_contract(self, proposal_type, contract):
        result = network.network_proposal_create(proposal_type=proposal_type, args={"toAddress": "x"})

        assert result.data["chainId"] == "AELF"
        assert result.data["contractAddress"] == AELF[contract]
        assert result.data["methodName"] == "CreateProposal"

    def test_unknown_proposal_type(self):
        result = network.network_proposal_create(proposal_type="Senate", args={})
        assert result.error.code == "INVALID_INPUT"

    def test_side_chain_unsupported(self):
        result = network.network_proposal_create(proposal_type="Parliament", args={}, chain_id="tDVV")
        assert result.error.code == "UNSUPPORTED_CHAIN"

    @pytest.mark.parametrize("action", ["Approve", "Reject", "Abstain", "Release"])
    def test_vote_actions(self, action):
        result = network.network_proposal_vote(proposal_type="Parliament", proposal_id=PROPOSAL_ID, action=action)

        assert result.data["methodName"] == action
        assert result.data["args"] == PROPOSAL_ID

    def test_invalid_vote_action(self):
        result = network.network_proposal_vote(proposal_type="Parliament", proposal_id=PROPOSAL_ID, action="Maybe")
        assert result.error.code == "INVALID_INPUT"

    def test_release(self):
        result = network.network_proposal_release(proposal_type="Association", proposal_id=PROPOSAL_ID)

        assert result.data["methodName"] == "Release"
        assert result.data["contractAddress"] == AELF["association"]


class TestOrganizationThresholds:
    """Test validate_organization_thresholds"""

    def test_valid_parliament(self):
        network.validate_organization_thresholds("Parliament", _org_args(6667, 2000, 2000, 7500))

    @pytest.mark.parametrize("args,fragment", [
        (_org_args(8000, 1000, 1000, 7000), "Minimal Vote Threshold"),
        (_org_args(6000, 1000, 5000, 8000), "Abstention"),
        (_org_args(6000, 5000, 1000, 8000), "Rejection"),
    ])
    def test_invalid_parliament(self, args, fragment):
        with pytest.raises(InputError) as exc_info:
            network.validate_organization_thresholds("Parliament", args)

        assert exc_info.value.code == "INVALID_INPUT"
        assert fragment in exc_info.value.message

    def test_valid_association(self):
        network.validate_organization_thresholds("Association", _org_args(2, 1, 1, 3, ["a", "b", "c"]))

    @pytest.mark.parametrize("args", [
        _org_args(1, 0, 0, 4, ["a", "b", "c"]),
        _org_args(2, 0, 2, 2, ["a", "b", "c"]),
        _org_args(2, 2, 0, 2, ["a", "b", "c"]),
        _org_args(1, 0, 0, 1),
    ])
    def test_invalid_association(self, args):
        with pytest.raises(InputError):
            network.validate_organization_thresholds("Association", args)

    def test_referendum_only_checks_vote_threshold(self):
        network.validate_organization_thresholds("Referendum", _org_args(100, 50000, 50000, 100))

    def test_non_numeric_threshold(self):
        with pytest.raises(InputError):
            network.validate_organization_thresholds("Parliament", _org_args("lots", 0, 0, 1))

    def test_numeric_strings_accepted(self):
        network.validate_organization_thresholds("Parliament", _org_args("5000", "1000", "1000", "6000"))

    def test_organization_create(self):
        result = network.network_organization_create(
            proposal_type="Parliament", args=_org_args(6667, 2000, 2000, 7500)
        )

        assert result.data["methodName"] == "CreateOrganization"
        assert result.data["contractAddress"] == AELF["parliament"]

    def test_organization_create_rejects_bad_thresholds(self):
        result = network.network_organization_create(
            proposal_type="Parliament", args=_org_args(9000, 2000, 0, 9500)
        )
        assert result.error.code == "INVALID_INPUT"


class TestContractFlow:
    """Test the contract deployment flow"""

    @pytest.mark.parametrize("action", network.CONTRACT_FLOW_ACTIONS)
    def test_flow_start(self, action):
        result = network.network_contract_flow_start(action=action, args={"category": 0, "code": "AA=="})

        assert result.data["contractAddress"] == AELF["genesis"]
        assert result.data["methodName"] == action

    def test_flow_start_rejects_unknown_action(self):
        result = network.network_contract_flow_start(action="DestroyContract", args={})
        assert result.error.code == "INVALID_INPUT"

    def test_flow_release(self):
        result = network.network_contract_flow_release(
            method_name="ReleaseApprovedContract",
            proposal_id=PROPOSAL_ID,
            proposed_contract_input_hash="ef" * 32,
        )

        assert result.data["methodName"] == "ReleaseApprovedContract"
        assert result.data["args"] == {"proposalId": PROPOSAL_ID, "proposedContractInputHash": "ef" * 32}

    def test_flow_release_requires_hash(self):
        result = network.network_contract_flow_release(method_name="ReleaseCodeCheckedContract", proposal_id="p")
        assert result.error.code == "INVALID_INPUT"

    def test_flow_status(self):
        def fake_view(chain_id, contract_address, method_name, value):
            if method_name == "GetProposal":
                return {"proposalId": value, "toBeReleased": True}
            raise ChainError(ErrorCode.CONTRACT_VIEW_ERROR, "not registered")

        with patch("tomorrowdao_skill.domains.network.view_contract", side_effect=fake_view) as mock_view:
            result = network.network_contract_flow_status(proposal_id=PROPOSAL_ID, code_hash="00" * 32)

        assert result.success is True
        assert result.data == {
            "proposalStatus": {"proposalId": PROPOSAL_ID, "toBeReleased": True},
            "registrationStatus": None,
        }
        assert mock_view.call_args_list[0].args[1] == AELF["parliament"]
        assert mock_view.call_args_list[1].args[1] == AELF["genesis"]

    def test_flow_status_without_lookups(self):
        with patch("tomorrowdao_skill.domains.network.view_contract") as mock_view:
            result = network.network_contract_flow_status()

        assert result.data == {"proposalStatus": None, "registrationStatus": None}
        mock_view.assert_not_called()


class TestApiOperations:
    """Test REST-backed governance reads and writes"""

    def test_proposals_list(self, requests_mock):
        matcher = requests_mock.get(
            f"{TEST_API_BASE}/api/app/networkdao/proposals",
            json={"code": "20000", "data": {"items": [{"proposalId": "p"}]}},
        )

        result = network.network_proposals_list(proposal_type=1, max_result_count=5)

        assert result.data == {"items": [{"proposalId": "p"}]}
        url = matcher.last_request.url
        assert "chainId=AELF" in url
        assert "proposalType=1" in url
        assert "maxResultCount=5" in url

    def test_proposal_get(self, requests_mock):
        requests_mock.get(
            f"{TEST_API_BASE}/api/app/networkdao/proposal/info",
            json={"code": "20000", "data": {"status": "Approved"}},
        )
        assert network.network_proposal_get(proposal_id="p").data == {"status": "Approved"}

    def test_organizations_list(self, requests_mock):
        requests_mock.get(f"{TEST_API_BASE}/api/app/networkdao/org", json={"code": "20000", "data": []})
        assert network.network_organizations_list().data == []

    def test_contract_name_check(self, requests_mock):
        requests_mock.get(
            f"{TEST_API_BASE}/api/app/networkdao/contract/check",
            json={"code": "20000", "data": {"exists": False}},
        )
        assert network.network_contract_name_check(contract_name="MyContract").data == {"exists": False}

    def test_contract_name_add(self, monkeypatch, requests_mock):
        monkeypatch.setenv("TMRW_PRIVATE_KEY", TEST_PRIV_KEY)
        requests_mock.post(f"{TEST_AUTH_BASE}/connect/token", json={"access_token": "tok", "expires_in": 3600})
        matcher = requests_mock.post(
            f"{TEST_API_BASE}/api/app/networkdao/contract/add",
            json={"code": "20000", "data": {"success": True}},
        )

        result = network.network_contract_name_add(
            operate_chain_id="AELF", contract_name="MyContract", tx_id="t1", action=0, address="a1",
        )

        assert result.data == {"success": True}
        assert matcher.last_request.json() == {
            "chainId": "AELF",
            "operateChainId": "AELF",
            "contractName": "MyContract",
            "txId": "t1",
            "action": 0,
            "address": "a1",
        }

    def test_contract_name_update_requires_fields(self):
        assert network.network_contract_name_update(contract_name="x").error.code == "INVALID_INPUT"
