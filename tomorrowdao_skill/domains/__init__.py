"""
Domain operations and the tool registry shared by the CLI and the MCP server.
"""
import inspect
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from ..models import ToolResult
from . import bp, dao, network, resource


@dataclass(frozen=True)
class ToolSpec:
    """One operation exposed as a CLI command and an MCP tool"""
    domain: str
    command: str
    operation: Callable[..., ToolResult]
    description: str

    @property
    def tool_name(self) -> str:
        """tomorrowdao_<domain>_<operation>, e.g. tomorrowdao_dao_discussion_list"""
        name = self.operation.__name__
        if not name.startswith(f"{self.domain}_"):
            name = f"{self.domain}_{name}"
        return f"tomorrowdao_{name}"

    @property
    def accepts_mode(self) -> bool:
        return "mode" in inspect.signature(self.operation).parameters


_TOOLS: Tuple[Tuple[str, str, Callable[..., ToolResult], str], ...] = (
    ("dao", "create", dao.dao_create, "Create a DAO (simulate by default)."),
    ("dao", "update-metadata", dao.dao_update_metadata, "Update DAO metadata."),
    ("dao", "upload-files", dao.dao_upload_files, "Upload DAO file infos."),
    ("dao", "remove-files", dao.dao_remove_files, "Remove DAO file infos by cid."),
    ("dao", "proposal-create", dao.dao_proposal_create,
     "Create a DAO proposal (CreateTransferProposal / CreateProposal / CreateVetoProposal)."),
    ("dao", "vote", dao.dao_vote, "Vote on a DAO proposal."),
    ("dao", "withdraw", dao.dao_withdraw, "Withdraw tokens locked by DAO votes."),
    ("dao", "execute", dao.dao_execute, "Execute an approved DAO proposal."),
    ("dao", "discussion-list", dao.discussion_list, "List proposal discussion comments."),
    ("dao", "discussion-comment", dao.discussion_comment, "Post a proposal comment (requires auth)."),
    ("dao", "proposal-my-info", dao.dao_proposal_my_info, "Get an address's voting info on a proposal (requires auth)."),
    ("dao", "token-allowance-view", dao.dao_token_allowance_view, "Read a token allowance on chain."),

    ("network", "proposals-list", network.network_proposals_list, "List network governance proposals."),
    ("network", "proposal-get", network.network_proposal_get, "Get a network governance proposal."),
    ("network", "proposal-create", network.network_proposal_create,
     "Create a Parliament / Association / Referendum proposal."),
    ("network", "proposal-vote", network.network_proposal_vote,
     "Approve, reject, abstain on or release a network proposal."),
    ("network", "proposal-release", network.network_proposal_release, "Release an approved network proposal."),
    ("network", "org-create", network.network_organization_create,
     "Create a governance organization (thresholds are validated first)."),
    ("network", "org-list", network.network_organizations_list, "List governance organizations."),
    ("network", "contract-name-check", network.network_contract_name_check, "Check contract name availability."),
    ("network", "contract-name-add", network.network_contract_name_add, "Register a contract name (requires auth)."),
    ("network", "contract-name-update", network.network_contract_name_update,
     "Update a contract name (requires auth)."),
    ("network", "contract-flow-start", network.network_contract_flow_start,
     "Start a contract deploy/update flow via the Genesis contract."),
    ("network", "contract-flow-release", network.network_contract_flow_release,
     "Release an approved or code-checked contract proposal."),
    ("network", "contract-flow-status", network.network_contract_flow_status,
     "Look up proposal and code registration status of a contract flow."),

    ("bp", "apply", bp.bp_apply, "Announce a block-producer candidacy."),
    ("bp", "quit", bp.bp_quit, "Quit the block-producer election."),
    ("bp", "vote", bp.bp_vote, "Vote for a block-producer candidate."),
    ("bp", "withdraw", bp.bp_withdraw, "Withdraw an expired election vote."),
    ("bp", "change-vote", bp.bp_change_vote, "Move a vote to another candidate."),
    ("bp", "claim-profits", bp.bp_claim_profits, "Claim voting profits."),
    ("bp", "votes-list", bp.bp_votes_list, "List election votes."),
    ("bp", "team-desc-get", bp.bp_team_desc_get, "Get a candidate team description."),
    ("bp", "team-desc-list", bp.bp_team_desc_list, "List all candidate team descriptions."),
    ("bp", "team-desc-add", bp.bp_team_desc_add, "Publish a candidate team description (requires auth)."),
    ("bp", "vote-reclaim", bp.bp_vote_reclaim, "Mark a vote as reclaimed (requires auth)."),

    ("resource", "buy", resource.resource_buy, "Buy a resource token."),
    ("resource", "sell", resource.resource_sell, "Sell a resource token."),
    ("resource", "realtime-records", resource.resource_realtime_records, "List realtime resource trades."),
    ("resource", "turnover", resource.resource_turnover, "Get resource trading turnover."),
    ("resource", "records", resource.resource_records, "List resource trade records."),
)

TOOLS: List[ToolSpec] = [ToolSpec(*entry) for entry in _TOOLS]


def tools_by_domain() -> Dict[str, Dict[str, ToolSpec]]:
    """domain -> command -> ToolSpec"""
    registry: Dict[str, Dict[str, ToolSpec]] = {}
    for spec in TOOLS:
        registry.setdefault(spec.domain, {})[spec.command] = spec
    return registry


__all__ = ["TOOLS", "ToolSpec", "bp", "dao", "network", "resource", "tools_by_domain"]
