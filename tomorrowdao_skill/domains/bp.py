"""
Block-producer election operations on the AELF main chain.
"""
from typing import Any, Dict, List, Optional

from ..config import get_network_contract
from ..models import ToolResult
from ..results import ok, require_field, tool_operation
from .common import Mode, api_get, api_post, ensure_main_chain, network_chain, paging, send_contract

DOMAIN = "bp domain"


def _election_send(method_name: str, args: Any, chain_id: Optional[str], mode: Optional[Mode],
                   contract: str = "election") -> ToolResult:
    require_field(args, "args")
    chain_id = ensure_main_chain(network_chain(chain_id), DOMAIN)
    return send_contract(chain_id, get_network_contract(contract), method_name, args, mode)


@tool_operation
def bp_apply(args: Optional[Dict[str, Any]] = None, chain_id: Optional[str] = None,
             mode: Optional[Mode] = None) -> ToolResult:
    """Announce a candidacy (Election AnnounceElection)"""
    return _election_send("AnnounceElection", args, chain_id, mode)


@tool_operation
def bp_quit(args: Any = None, chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    return _election_send("QuitElection", args, chain_id, mode)


@tool_operation
def bp_vote(args: Optional[Dict[str, Any]] = None, chain_id: Optional[str] = None,
            mode: Optional[Mode] = None) -> ToolResult:
    """Vote for a candidate, locking ELF for the given period"""
    return _election_send("Vote", args, chain_id, mode)


@tool_operation
def bp_withdraw(args: Any = None, chain_id: Optional[str] = None, mode: Optional[Mode] = None) -> ToolResult:
    """Withdraw an expired vote; args is the vote id"""
    return _election_send("Withdraw", args, chain_id, mode)


@tool_operation
def bp_change_vote(args: Optional[Dict[str, Any]] = None, chain_id: Optional[str] = None,
                   mode: Optional[Mode] = None) -> ToolResult:
    return _election_send("ChangeVotingOption", args, chain_id, mode)


@tool_operation
def bp_claim_profits(args: Optional[Dict[str, Any]] = None, chain_id: Optional[str] = None,
                     mode: Optional[Mode] = None) -> ToolResult:
    """Claim voting rewards from the Profit contract"""
    return _election_send("ClaimProfits", args, chain_id, mode, contract="profit")


@tool_operation
def bp_votes_list(skip_count: Optional[int] = None, max_result_count: Optional[int] = None,
                  chain_id: Optional[str] = None) -> ToolResult:
    data = api_get("/networkdao/votes", {
        "chainId": network_chain(chain_id),
        **paging(skip_count, max_result_count),
    })
    return ok(data)


@tool_operation
def bp_team_desc_get(public_key: Optional[str] = None, chain_id: Optional[str] = None) -> ToolResult:
    require_field(public_key, "publicKey")
    data = api_get("/networkdao/vote/getTeamDesc", {
        "chainId": network_chain(chain_id),
        "publicKey": public_key,
    })
    return ok(data)


@tool_operation
def bp_team_desc_list(chain_id: Optional[str] = None) -> ToolResult:
    data = api_get("/networkdao/vote/getAllTeamDesc", {"chainId": network_chain(chain_id)})
    return ok(data)


@tool_operation
def bp_team_desc_add(public_key: Optional[str] = None, address: Optional[str] = None, name: Optional[str] = None,
                     avatar: Optional[str] = None, intro: Optional[str] = None, tx_id: Optional[str] = None,
                     is_active: Optional[bool] = None, socials: Optional[List[str]] = None,
                     official_website: Optional[str] = None, location: Optional[str] = None,
                     mail: Optional[str] = None, update_time: Optional[str] = None,
                     chain_id: Optional[str] = None) -> ToolResult:
    """
    Publish a candidate team description (authenticated).

    Args:
        public_key: Candidate public key
        address: Candidate admin address
        name: Team name
        is_active: Defaults to True
    """
    require_field(public_key, "publicKey")
    require_field(address, "address")
    require_field(name, "name")
    data = api_post("/networkdao/vote/addTeamDesc", {
        "chainId": network_chain(chain_id),
        "publicKey": public_key,
        "address": address,
        "name": name,
        "avatar": avatar,
        "intro": intro,
        "txId": tx_id,
        "isActive": True if is_active is None else is_active,
        "socials": socials,
        "officialWebsite": official_website,
        "location": location,
        "mail": mail,
        "updateTime": update_time,
    }, auth=True)
    return ok(data)


@tool_operation
def bp_vote_reclaim(vote_id: Optional[str] = None, proposal_id: Optional[str] = None,
                    chain_id: Optional[str] = None) -> ToolResult:
    """Mark a withdrawn vote as reclaimed (authenticated)"""
    require_field(vote_id, "voteId")
    data = api_post("/networkdao/vote/reclaim", {
        "chainId": network_chain(chain_id),
        "voteId": vote_id,
        "proposalId": proposal_id,
    }, auth=True)
    return ok(data)
