"""Hot Potato Protocol Constants.

Canonical source for wire-level constants and environment-driven defaults.

Environment Variable Configuration:
    HOTPOTATO_PEERS - Number of peers in the ring (default: 4)
    HOTPOTATO_BACKEND - threads|processes (default: threads)
    HOTPOTATO_SEED - Base RNG seed; each peer adds its own id (default: unset)
    HOTPOTATO_TIMEOUT - Seconds to wait on a receive or acknowledgement
        before failing the run (default: unset, block forever)
"""

from __future__ import annotations

# ============================================
# Topology
# ============================================
# Peer 0 prints global status and owns the authoritative PlayingSet.

COORDINATOR_ID = 0

# Every message on the wire is a fixed record of this many integers:
# (sender_id, token, next_player_id, flag)
WIRE_FIELDS = 4

# ============================================
# Runtime Defaults
# ============================================

ENV_PREFIX = "HOTPOTATO_"

# HOTPOTATO_PEERS and HOTPOTATO_BACKEND override these through config_from_env
DEFAULT_NUM_PEERS = 4

# - "threads": one thread per peer inside this interpreter
# - "processes": one OS process per peer (multiprocessing)
DEFAULT_BACKEND = "threads"
BACKENDS = ("threads", "processes")

# Extra seconds the runner waits for peers on top of the transport timeout
JOIN_GRACE_SECONDS = 5.0

# How often the threads runner checks for finished or failed peers
THREAD_POLL_SECONDS = 0.05
