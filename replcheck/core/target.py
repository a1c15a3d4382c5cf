from ..datastructures.type_aliases import NodeCount, ReplicationFactor

DEFAULT_DESIRED_FACTOR: ReplicationFactor = 3


def resolve_target_factor(
    node_count: NodeCount, desired_factor: ReplicationFactor = DEFAULT_DESIRED_FACTOR
) -> ReplicationFactor:
    """Replica count the cluster can actually reach.

    A cluster smaller than the desired factor cannot hold that many copies,
    so the target is capped by the node count.
    """
    if node_count < 1:
        raise ValueError(f"cluster must have at least one node, got {node_count}")
    if desired_factor < 1:
        raise ValueError(f"desired factor must be positive, got {desired_factor}")
    return min(desired_factor, node_count)
