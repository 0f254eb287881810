#!/usr/bin/env python3
"""
Simple example of using the TomorrowDAO skill.
"""
import json
import os

from tomorrowdao_skill.domains import dao, network


def main():
    """
    Demonstrate basic usage of the domain operations.

    This example shows how to:
    1. Preview a DAO vote without broadcasting it
    2. Read a token allowance from the chain
    3. Validate an organization before creating it
    """
    owner = os.environ.get("OWNER_ADDRESS")
    spender = os.environ.get("SPENDER_ADDRESS")

    # Writes default to simulate mode: nothing is signed or sent
    preview = dao.dao_vote(args={
        "votingItemId": "8d7e8f3c0a6f4b8e9a8f7c6b5a4e3d2c1b0a9f8e7d6c5b4a3f2e1d0c9b8a7f6e",
        "voteOption": 0,
        "voteAmount": 1,
    })
    print(json.dumps(preview.to_dict(), indent=2))

    if owner and spender:
        allowance = dao.dao_token_allowance_view(symbol="ELF", owner=owner, spender=spender)
        if allowance.success:
            print(f"Allowance: {allowance.data.get('allowance', '0')}")
        else:
            print(f"Allowance lookup failed: {allowance.error.code} {allowance.error.message}")
    else:
        print("Set OWNER_ADDRESS and SPENDER_ADDRESS to read an allowance")

    # Threshold problems are reported before anything reaches the chain
    org = network.network_organization_create(
        proposal_type="Parliament",
        args={
            "proposalReleaseThreshold": {
                "minimalApprovalThreshold": 9000,
                "maximalRejectionThreshold": 2000,
                "maximalAbstentionThreshold": 0,
                "minimalVoteThreshold": 9500,
            },
        },
    )
    print(f"Organization preview: {org.success} {org.error.message if org.error else ''}")


if __name__ == "__main__":
    main()
