"""
Persistence Module - Policy Snapshot Files.

    - write_policy: dump a state space and value table (text or .npz)
    - read_policy: rebuild a state space and value table from a snapshot
    - read_dims: feature dimension and action count recorded in a snapshot
"""

from tabular_q.persistence.policy_file import read_dims, read_policy, write_policy

__all__ = ["read_dims", "read_policy", "write_policy"]
