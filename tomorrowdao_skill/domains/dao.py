"""
TomorrowDAO DAO operations: DAO lifecycle, proposals, votes and discussion.

Contract writes default to simulate mode and run on TMRW_CHAIN_DEFAULT_DAO
unless a chain id is given.
"""
from typing import Any, Dict, List, Optional

from ..config import get_config, get_token_contract_address
from ..models import ToolResult
from ..results import ok, require_field, tool_operation
from .common import (
    Mode,
    api_get,
    api_post,
    dao_chain,
    paging,
    require_choice,
    require_non_empty_list,
    send_contract,
    view_contract,
)

PROPOSAL_METHODS = ("CreateTransferProposal", "CreateProposal", "CreateVetoProposal")


def _dao_contracts() -> Dict[str, str]:
    return get_config().contracts["dao"]


@tool_operation
def dao_create(args: Optional[Dict[str, Any]] = None, chain_id: Optional[str] = None,
               mode: Optional[Mode] = None) -> ToolResult:
    """Create a DAO (DAO contract CreateDAO)"""
    require_field(args, "args")
    return send_contract(dao_chain(chain_id), _dao_contracts()["daoAddress"], "CreateDAO", args, mode)


@tool_operation
def dao_update_metadata(dao_id: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None,
                        chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    """Update a DAO's name, logo, description and links"""
    require_field(dao_id, "daoId")
    require_field(metadata, "metadata")
    return send_contract(
        dao_chain(chain_id),
        _dao_contracts()["daoAddress"],
        "UpdateMetadata",
        {"daoId": dao_id, "metadata": metadata},
        mode,
    )


@tool_operation
def dao_upload_files(dao_id: Optional[str] = None, files: Optional[List[Dict[str, Any]]] = None,
                     chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    """
    Attach files to a DAO.

    Args:
        dao_id: DAO id (hash hex)
        files: Non-empty list of {cid, name, url}
    """
    require_field(dao_id, "daoId")
    require_non_empty_list(files, "files")
    return send_contract(
        dao_chain(chain_id),
        _dao_contracts()["daoAddress"],
        "UploadFileInfos",
        {"daoId": dao_id, "files": files},
        mode,
    )


@tool_operation
def dao_remove_files(dao_id: Optional[str] = None, file_cids: Optional[List[str]] = None,
                     chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    require_field(dao_id, "daoId")
    require_non_empty_list(file_cids, "fileCids")
    return send_contract(
        dao_chain(chain_id),
        _dao_contracts()["daoAddress"],
        "RemoveFileInfos",
        {"daoId": dao_id, "fileCids": file_cids},
        mode,
    )


@tool_operation
def dao_proposal_create(method_name: Optional[str] = None, args: Optional[Dict[str, Any]] = None,
                        chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    """
    Create a DAO proposal.

    Args:
        method_name: CreateTransferProposal, CreateProposal or CreateVetoProposal
        args: Proposal input as accepted by the proposal contract
    """
    require_field(method_name, "methodName")
    require_choice(method_name, "methodName", PROPOSAL_METHODS)
    require_field(args, "args")
    return send_contract(dao_chain(chain_id), _dao_contracts()["proposalAddress"], method_name, args, mode)


@tool_operation
def dao_vote(args: Optional[Dict[str, Any]] = None, chain_id: Optional[str] = None,
             mode: Optional[Mode] = None) -> ToolResult:
    require_field(args, "args")
    return send_contract(dao_chain(chain_id), _dao_contracts()["voteAddress"], "Vote", args, mode)


@tool_operation
def dao_withdraw(args: Optional[Dict[str, Any]] = None, chain_id: Optional[str] = None,
                 mode: Optional[Mode] = None) -> ToolResult:
    """Withdraw tokens locked by votes"""
    require_field(args, "args")
    return send_contract(dao_chain(chain_id), _dao_contracts()["voteAddress"], "Withdraw", args, mode)


@tool_operation
def dao_execute(proposal_id: Optional[str] = None, chain_id: Optional[str] = None,
                mode: Optional[Mode] = None) -> ToolResult:
    require_field(proposal_id, "proposalId")
    return send_contract(dao_chain(chain_id), _dao_contracts()["proposalAddress"], "ExecuteProposal", proposal_id, mode)


@tool_operation
def discussion_list(proposal_id: Optional[str] = None, alias: Optional[str] = None,
                    skip_count: Optional[int] = None, max_result_count: Optional[int] = None,
                    chain_id: Optional[str] = None) -> ToolResult:
    """List comments on a proposal"""
    data = api_get("/discussion/comment-list", {
        "chainId": dao_chain(chain_id),
        "proposalId": proposal_id,
        "alias": alias,
        **paging(skip_count, max_result_count),
    })
    return ok(data)


@tool_operation
def discussion_comment(comment: Optional[str] = None, proposal_id: Optional[str] = None,
                       alias: Optional[str] = None, parent_id: Optional[str] = None,
                       chain_id: Optional[str] = None) -> ToolResult:
    """Post a comment (authenticated)"""
    require_field(comment, "comment")
    data = api_post("/discussion/new-comment", {
        "chainId": dao_chain(chain_id),
        "proposalId": proposal_id,
        "alias": alias,
        "comment": comment,
        "parentId": parent_id,
    }, auth=True)
    return ok(data)


@tool_operation
def dao_proposal_my_info(proposal_id: Optional[str] = None, address: Optional[str] = None,
                         dao_id: Optional[str] = None, chain_id: Optional[str] = None) -> ToolResult:
    """Voting power and vote history of an address on a proposal (authenticated)"""
    require_field(proposal_id, "proposalId")
    require_field(address, "address")
    require_field(dao_id, "daoId")
    data = api_get("/proposal/my-info", {
        "chainId": dao_chain(chain_id),
        "proposalId": proposal_id,
        "address": address,
        "daoId": dao_id,
    }, auth=True)
    return ok(data)


@tool_operation
def dao_token_allowance_view(symbol: Optional[str] = None, owner: Optional[str] = None,
                             spender: Optional[str] = None, chain_id: Optional[str] = None) -> ToolResult:
    """
    Read a token allowance from the MultiToken contract.

    Returns:
        ToolResult whose data is the decoded GetAllowance output
    """
    require_field(symbol, "symbol")
    require_field(owner, "owner")
    require_field(spender, "spender")
    chain_id = dao_chain(chain_id)
    data = view_contract(
        chain_id,
        get_token_contract_address(chain_id),
        "GetAllowance",
        {"symbol": symbol, "owner": owner, "spender": spender},
    )
    return ok(data or {})
