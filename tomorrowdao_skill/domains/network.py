"""
aelf network governance: Parliament, Association and Referendum proposals,
organizations and the contract deployment flow. Main chain (AELF) only.
"""
import logging
from typing import Any, Dict, Optional

from ..config import PROPOSAL_TYPES, get_network_contract, get_proposal_contract_address
from ..exceptions import ErrorCode, InputError, SkillError
from ..models import ToolResult
from ..results import ok, require_field, tool_operation
from .common import (
    Mode,
    api_get,
    api_post,
    ensure_main_chain,
    network_chain,
    paging,
    require_choice,
    send_contract,
    view_contract,
)

logger = logging.getLogger(__name__)

DOMAIN = "network governance"

VOTE_ACTIONS = ("Approve", "Reject", "Abstain", "Release")
CONTRACT_FLOW_ACTIONS = (
    "ProposeNewContract",
    "ProposeUpdateContract",
    "DeployUserSmartContract",
    "UpdateUserSmartContract",
)
CONTRACT_RELEASE_METHODS = ("ReleaseApprovedContract", "ReleaseCodeCheckedContract")

# Parliament thresholds are expressed in basis points of the member set
PARLIAMENT_THRESHOLD_SCALE = 10000


def _threshold(thresholds: Dict[str, Any], name: str) -> float:
    value = thresholds.get(name) or 0
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InputError(ErrorCode.INVALID_INPUT, f"{name} must be a number")


def validate_organization_thresholds(proposal_type: str, args: Optional[Dict[str, Any]]) -> None:
    """
    Check release thresholds before creating an organization.

    Parliament thresholds are compared against 10000 basis points while
    Association thresholds are compared against the raw member count.

    Raises:
        InputError: INVALID_INPUT if a threshold combination is impossible
    """
    args = args or {}
    thresholds = args.get("proposalReleaseThreshold") or {}
    min_approval = _threshold(thresholds, "minimalApprovalThreshold")
    max_rejection = _threshold(thresholds, "maximalRejectionThreshold")
    max_abstention = _threshold(thresholds, "maximalAbstentionThreshold")
    min_vote = _threshold(thresholds, "minimalVoteThreshold")

    if min_approval > min_vote:
        raise InputError(
            ErrorCode.INVALID_INPUT,
            "Minimal Approval Threshold must be less than or equal to Minimal Vote Threshold",
        )

    if proposal_type == "Parliament":
        if min_approval + max_abstention > PARLIAMENT_THRESHOLD_SCALE:
            raise InputError(
                ErrorCode.INVALID_INPUT,
                "Maximal Abstention Threshold + Minimal Approval Threshold must be <= 100%",
            )
        if min_approval + max_rejection > PARLIAMENT_THRESHOLD_SCALE:
            raise InputError(
                ErrorCode.INVALID_INPUT,
                "Maximal Rejection Threshold + Minimal Approval Threshold must be <= 100%",
            )

    elif proposal_type == "Association":
        members = (args.get("organizationMemberList") or {}).get("organizationMembers") or []
        member_count = len(members) if isinstance(members, list) else 0
        if min_vote > member_count:
            raise InputError(
                ErrorCode.INVALID_INPUT,
                "Minimal Vote Threshold must be <= organization member count",
            )
        if min_approval + max_abstention > member_count:
            raise InputError(
                ErrorCode.INVALID_INPUT,
                "Maximal Abstention Threshold + Minimal Approval Threshold must be <= organization member count",
            )
        if min_approval + max_rejection > member_count:
            raise InputError(
                ErrorCode.INVALID_INPUT,
                "Maximal Rejection Threshold + Minimal Approval Threshold must be <= organization member count",
            )


def _proposal_contract(chain_id: Optional[str], proposal_type: Optional[str]) -> tuple:
    require_field(proposal_type, "proposalType")
    require_choice(proposal_type, "proposalType", PROPOSAL_TYPES)
    chain_id = ensure_main_chain(network_chain(chain_id), DOMAIN)
    return chain_id, get_proposal_contract_address(chain_id, proposal_type)


@tool_operation
def network_proposals_list(proposal_type: Optional[int] = None, skip_count: Optional[int] = None,
                           max_result_count: Optional[int] = None, chain_id: Optional[str] = None) -> ToolResult:
    data = api_get("/networkdao/proposals", {
        "chainId": network_chain(chain_id),
        **paging(skip_count, max_result_count),
        "proposalType": proposal_type,
    })
    return ok(data)


@tool_operation
def network_proposal_get(proposal_id: Optional[str] = None, chain_id: Optional[str] = None) -> ToolResult:
    require_field(proposal_id, "proposalId")
    data = api_get("/networkdao/proposal/info", {
        "chainId": network_chain(chain_id),
        "proposalId": proposal_id,
    })
    return ok(data)


@tool_operation
def network_proposal_create(proposal_type: Optional[str] = None, args: Optional[Dict[str, Any]] = None,
                            chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    """
    Create a governance proposal.

    Args:
        proposal_type: Parliament, Association or Referendum
        args: CreateProposalInput (toAddress, contractMethodName, params, ...)
    """
    require_field(args, "args")
    chain_id, contract = _proposal_contract(chain_id, proposal_type)
    return send_contract(chain_id, contract, "CreateProposal", args, mode)


@tool_operation
def network_proposal_vote(proposal_type: Optional[str] = None, proposal_id: Optional[str] = None,
                          action: Optional[str] = None, chain_id: Optional[str] = None,
                          mode: Optional[Mode] = None) -> ToolResult:
    """Approve, reject, abstain on or release a proposal"""
    require_field(proposal_id, "proposalId")
    require_choice(action, "action", VOTE_ACTIONS)
    chain_id, contract = _proposal_contract(chain_id, proposal_type)
    return send_contract(chain_id, contract, action, proposal_id, mode)


@tool_operation
def network_proposal_release(proposal_type: Optional[str] = None, proposal_id: Optional[str] = None,
                             chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    require_field(proposal_id, "proposalId")
    chain_id, contract = _proposal_contract(chain_id, proposal_type)
    return send_contract(chain_id, contract, "Release", proposal_id, mode)


@tool_operation
def network_organization_create(proposal_type: Optional[str] = None, args: Optional[Dict[str, Any]] = None,
                                chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    """Create a Parliament, Association or Referendum organization"""
    require_field(args, "args")
    require_choice(proposal_type, "proposalType", PROPOSAL_TYPES)
    validate_organization_thresholds(proposal_type, args)
    chain_id, contract = _proposal_contract(chain_id, proposal_type)
    return send_contract(chain_id, contract, "CreateOrganization", args, mode)


@tool_operation
def network_organizations_list(proposal_type: Optional[int] = None, skip_count: Optional[int] = None,
                               max_result_count: Optional[int] = None, chain_id: Optional[str] = None) -> ToolResult:
    data = api_get("/networkdao/org", {
        "chainId": network_chain(chain_id),
        "proposalType": proposal_type,
        **paging(skip_count, max_result_count),
    })
    return ok(data)


@tool_operation
def network_contract_name_check(contract_name: Optional[str] = None, chain_id: Optional[str] = None) -> ToolResult:
    """Check whether a contract name is still available"""
    require_field(contract_name, "contractName")
    data = api_get("/networkdao/contract/check", {
        "chainId": network_chain(chain_id),
        "contractName": contract_name,
    })
    return ok(data)


@tool_operation
def network_contract_name_add(operate_chain_id: Optional[str] = None, contract_name: Optional[str] = None,
                              tx_id: Optional[str] = None, action: Optional[int] = None,
                              address: Optional[str] = None, proposal_id: Optional[str] = None,
                              create_at: Optional[str] = None, chain_id: Optional[str] = None) -> ToolResult:
    """Register a contract name for a deployment (authenticated)"""
    require_field(operate_chain_id, "operateChainId")
    require_field(contract_name, "contractName")
    require_field(tx_id, "txId")
    require_field(address, "address")
    data = api_post("/networkdao/contract/add", {
        "chainId": network_chain(chain_id),
        "operateChainId": operate_chain_id,
        "contractName": contract_name,
        "txId": tx_id,
        "action": action,
        "address": address,
        "proposalId": proposal_id,
        "createAt": create_at,
    }, auth=True)
    return ok(data)


@tool_operation
def network_contract_name_update(contract_name: Optional[str] = None, address: Optional[str] = None,
                                 contract_address: Optional[str] = None, operate_chain_id: Optional[str] = None,
                                 ca_hash: Optional[str] = None, chain_id: Optional[str] = None) -> ToolResult:
    """Rename a deployed contract (authenticated)"""
    require_field(contract_name, "contractName")
    require_field(address, "address")
    require_field(contract_address, "contractAddress")
    data = api_post("/networkdao/contract/update", {
        "chainId": network_chain(chain_id),
        "operateChainId": operate_chain_id,
        "contractName": contract_name,
        "address": address,
        "contractAddress": contract_address,
        "caHash": ca_hash,
    }, auth=True)
    return ok(data)


@tool_operation
def network_contract_flow_start(action: Optional[str] = None, args: Optional[Dict[str, Any]] = None,
                                chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    """
    Start a contract deployment or update through the Genesis contract.

    Args:
        action: ProposeNewContract, ProposeUpdateContract,
            DeployUserSmartContract or UpdateUserSmartContract
        args: ContractDeploymentInput / ContractUpdateInput
    """
    require_choice(action, "action", CONTRACT_FLOW_ACTIONS)
    require_field(args, "args")
    chain_id = ensure_main_chain(network_chain(chain_id), DOMAIN)
    return send_contract(chain_id, get_network_contract("genesis"), action, args, mode)


@tool_operation
def network_contract_flow_release(method_name: Optional[str] = None, proposal_id: Optional[str] = None,
                                  proposed_contract_input_hash: Optional[str] = None,
                                  chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    require_choice(method_name, "methodName", CONTRACT_RELEASE_METHODS)
    require_field(proposal_id, "proposalId")
    require_field(proposed_contract_input_hash, "proposedContractInputHash")
    chain_id = ensure_main_chain(network_chain(chain_id), DOMAIN)
    return send_contract(
        chain_id,
        get_network_contract("genesis"),
        method_name,
        {"proposalId": proposal_id, "proposedContractInputHash": proposed_contract_input_hash},
        mode,
    )


def _lookup(chain_id: str, contract_address: str, method_name: str, value: str) -> Any:
    try:
        return view_contract(chain_id, contract_address, method_name, value)
    except SkillError as e:
        logger.warning(f"{method_name} lookup failed: {e.code} {e.message}")
        return None


@tool_operation
def network_contract_flow_status(proposal_id: Optional[str] = None, code_hash: Optional[str] = None,
                                 chain_id: Optional[str] = None) -> ToolResult:
    """
    Report where a deployment stands.

    Looks up the Parliament proposal and the Genesis code registration; a
    lookup that is not requested or fails is reported as None.
    """
    chain_id = ensure_main_chain(network_chain(chain_id), DOMAIN)
    proposal_status = None
    registration_status = None
    if proposal_id:
        proposal_status = _lookup(chain_id, get_network_contract("parliament"), "GetProposal", proposal_id)
    if code_hash:
        registration_status = _lookup(
            chain_id,
            get_network_contract("genesis"),
            "GetSmartContractRegistrationByCodeHash",
            code_hash,
        )
    return ok({"proposalStatus": proposal_status, "registrationStatus": registration_status})
