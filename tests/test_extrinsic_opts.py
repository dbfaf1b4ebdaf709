from pathlib import Path

from contract_extrinsics.env_check import Verbosity
from contract_extrinsics.extrinsic_opts import ExtrinsicOpts, ExtrinsicOptsBuilder

SIGNER = object()


def test_defaults():
    opts = ExtrinsicOptsBuilder(SIGNER).done()
    assert opts.signer is SIGNER
    assert opts.file is None
    assert opts.manifest_path is None
    assert opts.url == "ws://localhost:9944"
    assert opts.storage_deposit_limit is None
    assert opts.verbosity is Verbosity.DEFAULT


def test_default_url_string_keeps_port():
    opts = ExtrinsicOptsBuilder(SIGNER).done()
    assert opts.url_string() == "ws://localhost:9944/"


def test_url_string_adds_default_port():
    opts = ExtrinsicOptsBuilder(SIGNER).url("wss://test.io/test/1").done()
    assert opts.url_string() == "wss://test.io:443/test/1"


def test_setters_are_applied():
    opts = (
        ExtrinsicOptsBuilder(SIGNER)
        .file("target/ink/flipper.contract")
        .manifest_path(Path("Cargo.toml"))
        .storage_deposit_limit(1000)
        .verbosity(Verbosity.VERBOSE)
        .done()
    )
    assert opts.file == Path("target/ink/flipper.contract")
    assert opts.manifest_path == Path("Cargo.toml")
    assert opts.storage_deposit_limit == 1000
    assert opts.verbosity is Verbosity.VERBOSE


def test_clearing_optional_values():
    opts = (
        ExtrinsicOptsBuilder(SIGNER)
        .file("a.contract")
        .file(None)
        .storage_deposit_limit(5)
        .storage_deposit_limit(None)
        .done()
    )
    assert opts.file is None
    assert opts.storage_deposit_limit is None


def test_done_snapshot_is_not_changed_by_later_setters():
    builder = ExtrinsicOptsBuilder(SIGNER)
    first = builder.done()
    second = builder.url("ws://127.0.0.1:9955").done()
    assert first.url == "ws://localhost:9944"
    assert second.url == "ws://127.0.0.1:9955"


def test_builder_result_equals_direct_construction():
    built = ExtrinsicOptsBuilder(SIGNER).file("x.contract").done()
    assert built == ExtrinsicOpts(signer=SIGNER, file=Path("x.contract"))