"""Tests for the plugin kernel: registration, set-if-absent and lifecycle ordering."""

import asyncio

import pytest

from logweave.foundation.errors import ConfigurationError, PluginLifecycleError, PluginTeardownError
from logweave.plugins import TimestampPlugin
from logweave.runtime.context import LogContext
from logweave.runtime.kernel import FunctionPlugin, Plugin, PluginKernel, define_plugin


class RecordingPlugin(Plugin):
    """Plugin that records its hooks into a shared list."""

    def __init__(self, name: str, calls: list[str], *, fail_init: bool = False, fail_destroy: bool = False,
                 delay: float = 0.0) -> None:
        self.name = name
        self.calls = calls
        self.fail_init = fail_init
        self.fail_destroy = fail_destroy
        self.delay = delay

    def install(self, kernel: PluginKernel) -> None:
        self.calls.append(f"install:{self.name}")

    async def on_init(self) -> None:
        self.calls.append(f"init-start:{self.name}")
        await asyncio.sleep(self.delay)
        if self.fail_init:
            raise RuntimeError(f"{self.name} init boom")
        self.calls.append(f"init-end:{self.name}")

    async def on_destroy(self) -> None:
        await asyncio.sleep(self.delay)
        self.calls.append(f"destroy:{self.name}")
        if self.fail_destroy:
            raise RuntimeError(f"{self.name} destroy boom")


@pytest.fixture
def kernel() -> PluginKernel:
    return PluginKernel(LogContext())


class TestRegistration:
    """use() / unregister() / lookup."""

    def test_install_runs_before_use_returns(self, kernel: PluginKernel) -> None:
        calls: list[str] = []
        kernel.use(RecordingPlugin("a", calls))
        assert calls == ["install:a"]
        assert kernel.has("a") and "a" in kernel and len(kernel) == 1
        assert kernel.get("a").name == "a"

    def test_define_plugin_builds_function_plugin(self, kernel: PluginKernel) -> None:
        seen: list[str] = []
        plugin = define_plugin("audit", lambda k: seen.append("installed"), version="2.0.0")
        assert isinstance(plugin, FunctionPlugin)
        assert (plugin.name, plugin.version, plugin.on_init, plugin.on_destroy) == ("audit", "2.0.0", None, None)
        assert repr(plugin) == "<FunctionPlugin audit@2.0.0>"
        kernel.use(plugin)
        assert seen == ["installed"]

    def test_function_plugin_takes_keywords_only(self) -> None:
        plugin = FunctionPlugin(setup=lambda k: None, name="direct")
        assert plugin.version == "1.0.0"
        with pytest.raises(TypeError):
            FunctionPlugin("direct", "1.0.0", lambda k: None)  # type: ignore[misc]

    def test_duplicate_name_fails_loudly(self, kernel: PluginKernel) -> None:
        calls: list[str] = []
        kernel.use(RecordingPlugin("a", calls))
        with pytest.raises(ConfigurationError, match="already registered"):
            kernel.use(RecordingPlugin("a", calls))
        assert len(kernel) == 1

    def test_replace_moves_plugin_to_end_without_teardown(self, kernel: PluginKernel) -> None:
        calls: list[str] = []
        first = RecordingPlugin("a", calls)
        kernel.use(first)
        kernel.use(RecordingPlugin("b", calls))
        replacement = RecordingPlugin("a", calls)
        kernel.use(replacement, replace=True)
        assert [p.name for p in kernel.list()] == ["b", "a"]
        assert kernel.get("a") is replacement
        assert "destroy:a" not in calls

    def test_install_failure_does_not_register(self, kernel: PluginKernel) -> None:
        def boom(_kernel: PluginKernel) -> None:
            raise ValueError("nope")

        with pytest.raises(PluginLifecycleError) as exc:
            kernel.use(define_plugin("bad", boom))
        assert exc.value.phase == "install"
        assert exc.value.plugin_name == "bad"
        assert isinstance(exc.value.__cause__, ValueError)
        assert not kernel.has("bad")

    @pytest.mark.parametrize("plugin", [
        object(),
        define_plugin("", lambda k: None),
        define_plugin("x", lambda k: None, on_init="not callable"),  # type: ignore[arg-type]
    ])
    def test_invalid_shapes_rejected(self, kernel: PluginKernel, plugin: object) -> None:
        with pytest.raises(ConfigurationError):
            kernel.use(plugin)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_unregister_runs_destroy(self, kernel: PluginKernel) -> None:
        calls: list[str] = []
        kernel.use(RecordingPlugin("a", calls))
        assert await kernel.unregister("a") is True
        assert calls[-1] == "destroy:a"
        assert await kernel.unregister("a") is False

    @pytest.mark.asyncio
    async def test_unregister_failure_still_removes(self, kernel: PluginKernel) -> None:
        kernel.use(RecordingPlugin("a", [], fail_destroy=True))
        with pytest.raises(PluginLifecycleError) as exc:
            await kernel.unregister("a")
        assert exc.value.phase == "destroy"
        assert not kernel.has("a")


class TestSetIfAbsent:
    """Plugins never override explicit context values."""

    def test_explicit_false_timestamp_survives_reinstalls(self) -> None:
        ctx = LogContext(timestamp=False)
        kernel = PluginKernel(ctx)
        kernel.use(TimestampPlugin())
        for _ in range(3):
            kernel.use(TimestampPlugin(), replace=True)
        assert ctx.timestamp is False

    def test_first_installer_wins(self) -> None:
        ctx = LogContext()
        kernel = PluginKernel(ctx)
        kernel.use(define_plugin("one", lambda k: k.get_context().set_default("region", "eu")))
        kernel.use(define_plugin("two", lambda k: k.get_context().set_default("region", "us")))
        assert ctx["region"] == "eu"
        assert "region" in ctx

    def test_context_is_shared_not_copied(self, kernel: PluginKernel) -> None:
        seen: list[LogContext] = []
        kernel.use(define_plugin("observer", lambda k: seen.append(k.get_context())))
        assert seen[0] is kernel.get_context()


class TestLifecycle:
    """init() in registration order, destroy() in reverse."""

    @pytest.mark.asyncio
    async def test_init_sequential_in_registration_order(self, kernel: PluginKernel) -> None:
        calls: list[str] = []
        # the slow first plugin must finish before the second starts
        kernel.use(RecordingPlugin("a", calls, delay=0.02))
        kernel.use(RecordingPlugin("b", calls))
        kernel.use(define_plugin("no-hooks", lambda k: None))
        await kernel.init()
        assert [c for c in calls if c.startswith("init")] == [
            "init-start:a", "init-end:a", "init-start:b", "init-end:b"]

    @pytest.mark.asyncio
    async def test_init_fail_fast(self, kernel: PluginKernel) -> None:
        calls: list[str] = []
        kernel.use(RecordingPlugin("a", calls, fail_init=True))
        kernel.use(RecordingPlugin("b", calls))
        with pytest.raises(PluginLifecycleError) as exc:
            await kernel.init()
        assert exc.value.phase == "init"
        assert exc.value.plugin_name == "a"
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert "init-start:b" not in calls

    @pytest.mark.asyncio
    async def test_destroy_reverse_order_and_clears(self, kernel: PluginKernel) -> None:
        calls: list[str] = []
        for name in ("a", "b", "c"):
            kernel.use(RecordingPlugin(name, calls, delay=0.001))
        await kernel.destroy()
        assert [c for c in calls if c.startswith("destroy")] == ["destroy:c", "destroy:b", "destroy:a"]
        assert len(kernel) == 0

    @pytest.mark.asyncio
    async def test_destroy_attempts_all_and_aggregates(self, kernel: PluginKernel) -> None:
        calls: list[str] = []
        kernel.use(RecordingPlugin("a", calls, fail_destroy=True))
        kernel.use(RecordingPlugin("b", calls))
        kernel.use(RecordingPlugin("c", calls, fail_destroy=True))
        with pytest.raises(PluginTeardownError) as exc:
            await kernel.destroy()
        assert [f.plugin_name for f in exc.value.failures] == ["c", "a"]
        assert calls.count("destroy:b") == 1
        assert len(kernel) == 0

    @pytest.mark.asyncio
    async def test_sync_hooks_supported(self, kernel: PluginKernel) -> None:
        calls: list[str] = []
        kernel.use(define_plugin("sync", lambda k: None,
                                 on_init=lambda: calls.append("init"), on_destroy=lambda: calls.append("destroy")))
        await kernel.init()
        await kernel.destroy()
        assert calls == ["init", "destroy"]
