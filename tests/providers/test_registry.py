"""
Unit tests for agent_knowledge.providers.registry
"""

from __future__ import annotations

import threading

import pytest

from agent_knowledge.providers import (
    EmbeddingProvider,
    EmbeddingProviderRegistry,
    ProviderKind,
    ProviderUnavailableError,
)


class StubProvider(EmbeddingProvider):
    kind = "stub"

    def __init__(self, dimensions=3, name=""):
        super().__init__(dimensions)
        self.name = name

    def _initialize(self):
        raise AssertionError("registry must not initialize providers")

    def _embed(self, text):
        return [0.0] * self.dimensions


class TestRegistryBasics:
    def test_empty(self):
        reg = EmbeddingProviderRegistry()
        assert len(reg) == 0
        assert reg.get_provider(ProviderKind.LOCAL) is None
        assert not reg.has_provider(ProviderKind.LOCAL)

    def test_register_and_get(self):
        reg = EmbeddingProviderRegistry()
        p = StubProvider()
        reg.register_provider(ProviderKind.LOCAL, p)
        assert reg.get_provider(ProviderKind.LOCAL) is p
        assert reg.has_provider(ProviderKind.LOCAL)
        assert ProviderKind.LOCAL in reg

    def test_string_and_enum_kinds_share_a_slot(self):
        reg = EmbeddingProviderRegistry()
        p = StubProvider()
        reg.register_provider("local", p)
        assert reg.get_provider(ProviderKind.LOCAL) is p

    def test_last_write_wins(self):
        reg = EmbeddingProviderRegistry()
        p1, p2 = StubProvider(name="p1"), StubProvider(name="p2")
        reg.register_provider(ProviderKind.OPENAI, p1)
        assert reg.has_provider(ProviderKind.OPENAI)
        reg.register_provider(ProviderKind.OPENAI, p2)
        assert reg.has_provider(ProviderKind.OPENAI)
        assert reg.get_provider(ProviderKind.OPENAI) is p2
        assert len(reg) == 1

    def test_no_readiness_check(self):
        reg = EmbeddingProviderRegistry()
        p = StubProvider()
        reg.register_provider("stub", p)
        assert not p.is_ready

    def test_get_never_raises(self):
        reg = EmbeddingProviderRegistry()
        assert reg.get_provider(["unhashable"]) is None
        assert reg.get_provider(None) is None

    def test_unregister(self):
        reg = EmbeddingProviderRegistry()
        reg.register_provider("stub", StubProvider())
        assert reg.unregister_provider("stub") is True
        assert reg.unregister_provider("stub") is False
        assert not reg.has_provider("stub")

    def test_kinds(self):
        reg = EmbeddingProviderRegistry()
        reg.register_provider(ProviderKind.LOCAL, StubProvider())
        reg.register_provider("custom", StubProvider())
        assert set(reg.kinds()) == {"local", "custom"}

    def test_require_provider(self):
        reg = EmbeddingProviderRegistry()
        p = StubProvider()
        reg.register_provider("stub", p)
        assert reg.require_provider("stub") is p
        with pytest.raises(ProviderUnavailableError):
            reg.require_provider("missing")

    def test_instances_are_independent(self):
        a, b = EmbeddingProviderRegistry(), EmbeddingProviderRegistry()
        a.register_provider("stub", StubProvider())
        assert not b.has_provider("stub")


class TestRegistryConcurrency:
    def test_concurrent_registration_of_distinct_kinds(self):
        reg = EmbeddingProviderRegistry()
        kinds = [f"kind-{i}" for i in range(64)]
        barrier = threading.Barrier(len(kinds))

        def _register(kind):
            barrier.wait()
            reg.register_provider(kind, StubProvider(name=kind))

        threads = [threading.Thread(target=_register, args=(k,)) for k in kinds]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(reg) == len(kinds)
        for kind in kinds:
            assert reg.has_provider(kind)
            assert reg.get_provider(kind).name == kind

    def test_concurrent_reads_and_writes_same_kind(self):
        reg = EmbeddingProviderRegistry()
        providers = [StubProvider(name=str(i)) for i in range(20)]
        reg.register_provider("shared", providers[0])
        seen = []

        def _writer():
            for p in providers:
                reg.register_provider("shared", p)

        def _reader():
            for _ in range(200):
                seen.append(reg.get_provider("shared"))

        threads = [threading.Thread(target=_writer)] + [
            threading.Thread(target=_reader) for _ in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(p in providers for p in seen)
        assert reg.get_provider("shared") is providers[-1]
