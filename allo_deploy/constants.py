from pathlib import Path

#
# Filesystem
#

DEPLOYMENT_DIR = Path(__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

#
# Networks
#

DEFAULT_NETWORK = "ethereum:local:test"
LOCAL_NETWORKS = ["local"]

#
# Contracts
#

RFP_SIMPLE_STRATEGY = "RFPSimpleStrategy"
ALLO = "Allo"

# deployment order
ALLO_CONTRACTS = [RFP_SIMPLE_STRATEGY, ALLO]

CONTRACT_LABELS = {
    RFP_SIMPLE_STRATEGY: "RFPSimpleStrategy",
    ALLO: "Allo",
}
