"""Pytest configuration and builders for blockrewards tests."""

import sys

import pytest

NUM_VALIDATORS = 64
MAX_EFFECTIVE_BALANCE = 32 * 10**9
FAR_FUTURE_EPOCH = 2**64 - 1


def pytest_configure(config):
    """Select the minimal preset BEFORE any SSZ type module is imported.

    SSZ containers size their vectors with preset functions evaluated at
    class definition time.
    """
    for mod in list(sys.modules):
        if mod.startswith("blockrewards.spec.types"):
            del sys.modules[mod]

    from blockrewards.spec.constants import set_preset
    set_preset("minimal")

    from blockrewards.spec.network_config import NetworkConfig, set_config
    set_config(NetworkConfig.minimal())


def make_network_config(fork_name: str = "altair"):
    """Minimal network config with every fork up to fork_name active from genesis."""
    from blockrewards.spec.forks import ForkName
    from blockrewards.spec.network_config import NetworkConfig

    target = ForkName.from_key(fork_name)
    config = NetworkConfig.minimal()
    for fork in ForkName:
        if ForkName.PHASE0 < fork <= target:
            setattr(config, f"{fork.key}_fork_epoch", 0)
    return config


def field_value(container_type, name: str, values):
    """Build the SSZ value of a list/vector/bitfield field from Python values."""
    return container_type.fields()[name](*values)


@pytest.fixture
def network_config():
    return make_network_config("altair")


@pytest.fixture
def make_state():
    """Builder for a beacon state with active 32 ETH validators."""
    from blockrewards.spec.forks import ForkName
    from blockrewards.spec.types import Validator, get_fork_types

    def build(fork: str = "altair", slot: int = 9, num_validators: int = NUM_VALIDATORS, effective_balances=None):
        fork_name = ForkName.from_key(fork)
        state_type = get_fork_types(fork_name).state
        effective_balances = effective_balances or {}

        validators = [
            Validator(
                pubkey=bytes([i % 256]) * 48,
                effective_balance=effective_balances.get(i, MAX_EFFECTIVE_BALANCE),
                activation_epoch=0,
                exit_epoch=FAR_FUTURE_EPOCH,
                withdrawable_epoch=FAR_FUTURE_EPOCH,
            )
            for i in range(num_validators)
        ]
        block_roots = [bytes([i + 1]) * 32 for i in range(64)]

        fields = {
            "slot": slot,
            "validators": field_value(state_type, "validators", validators),
            "balances": field_value(state_type, "balances", [MAX_EFFECTIVE_BALANCE] * num_validators),
            "block_roots": field_value(state_type, "block_roots", block_roots),
        }
        if fork_name >= ForkName.ALTAIR:
            fields["previous_epoch_participation"] = field_value(
                state_type, "previous_epoch_participation", [0] * num_validators
            )
            fields["current_epoch_participation"] = field_value(
                state_type, "current_epoch_participation", [0] * num_validators
            )
        return state_type(**fields)

    return build


@pytest.fixture
def make_block():
    """Builder for an unsigned beacon block of a fork."""
    from blockrewards.spec.forks import ForkName
    from blockrewards.spec.types import get_fork_types

    def build(
        fork: str = "altair",
        slot: int = 9,
        proposer_index: int = 5,
        attestations=(),
        proposer_slashings=(),
        attester_slashings=(),
        sync_bits=None,
    ):
        fork_name = ForkName.from_key(fork)
        types = get_fork_types(fork_name)
        body_fields = {
            "attestations": field_value(types.body, "attestations", list(attestations)),
            "proposer_slashings": field_value(types.body, "proposer_slashings", list(proposer_slashings)),
            "attester_slashings": field_value(types.body, "attester_slashings", list(attester_slashings)),
        }
        if sync_bits is not None:
            sync_aggregate_type = types.body.fields()["sync_aggregate"]
            body_fields["sync_aggregate"] = sync_aggregate_type(
                sync_committee_bits=field_value(sync_aggregate_type, "sync_committee_bits", sync_bits),
            )
        return types.block(
            slot=slot,
            proposer_index=proposer_index,
            body=types.body(**body_fields),
        )

    return build


@pytest.fixture
def make_attestation():
    """Builder for a fully participating, timely attestation to slot 8 of the test state."""
    from blockrewards.spec.forks import ForkName
    from blockrewards.spec.types import AttestationData, Checkpoint, get_fork_types
    from blockrewards.spec.constants import MAX_COMMITTEES_PER_SLOT
    from blockrewards.spec.state_transition.helpers.beacon_committee import get_beacon_committee
    from blockrewards.spec.state_transition.helpers.misc import compute_epoch_at_slot

    def build(state, fork: str = "altair", slot: int = 8, committee_indices=(0,), source=None):
        fork_name = ForkName.from_key(fork)
        attestation_type = get_fork_types(fork_name).attestation
        root = bytes(state.block_roots[slot])

        data = AttestationData(
            slot=slot,
            index=0 if fork_name >= ForkName.ELECTRA else committee_indices[0],
            beacon_block_root=root,
            source=source if source is not None else Checkpoint(),
            target=Checkpoint(epoch=compute_epoch_at_slot(slot), root=root),
        )

        bits = []
        for committee_index in committee_indices:
            bits.extend([True] * len(get_beacon_committee(state, slot, committee_index)))

        fields = {
            "data": data,
            "aggregation_bits": field_value(attestation_type, "aggregation_bits", bits),
        }
        if fork_name >= ForkName.ELECTRA:
            committee_bits = [i in committee_indices for i in range(MAX_COMMITTEES_PER_SLOT())]
            fields["committee_bits"] = field_value(attestation_type, "committee_bits", committee_bits)
        return attestation_type(**fields)

    return build


@pytest.fixture
def make_proposer_slashing():
    from blockrewards.spec.types import BeaconBlockHeader, ProposerSlashing, SignedBeaconBlockHeader

    def build(proposer_index: int):
        return ProposerSlashing(
            signed_header_1=SignedBeaconBlockHeader(
                message=BeaconBlockHeader(slot=1, proposer_index=proposer_index, body_root=b"\x01" * 32),
            ),
            signed_header_2=SignedBeaconBlockHeader(
                message=BeaconBlockHeader(slot=1, proposer_index=proposer_index, body_root=b"\x02" * 32),
            ),
        )

    return build


@pytest.fixture
def make_attester_slashing():
    from blockrewards.spec.forks import ForkName
    from blockrewards.spec.types import get_fork_types

    def build(indices_1, indices_2, fork: str = "altair"):
        slashing_type = get_fork_types(ForkName.from_key(fork)).attester_slashing
        indexed_type = slashing_type.fields()["attestation_1"]
        return slashing_type(
            attestation_1=indexed_type(
                attesting_indices=field_value(indexed_type, "attesting_indices", sorted(indices_1)),
            ),
            attestation_2=indexed_type(
                attesting_indices=field_value(indexed_type, "attesting_indices", sorted(indices_2)),
            ),
        )

    return build
