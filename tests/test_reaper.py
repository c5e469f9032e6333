"""Tests for non-blocking reaping of terminated children."""

import os

from conftest import FakeWaitpid

from ssi.job_control import Reaper


class TestReaper:
    def test_no_children(self, registry):
        reaper = Reaper(registry, waitpid=FakeWaitpid(running=False))
        assert reaper.reap_all() == []

    def test_nothing_exited_yet(self, registry, fake_waitpid):
        registry.register(100, "sleep 5", "/tmp")
        reaper = Reaper(registry, waitpid=fake_waitpid)
        assert reaper.reap_all() == []
        assert 100 in registry

    def test_polls_without_blocking(self, registry, fake_waitpid):
        Reaper(registry, waitpid=fake_waitpid).reap_all()
        assert fake_waitpid.calls == [(-1, os.WNOHANG)]

    def test_removes_and_announces_tracked_job(self, registry, fake_waitpid, capsys):
        registry.register(100, "sleep 5", "/tmp")
        fake_waitpid.exit(100)
        reaped = Reaper(registry, waitpid=fake_waitpid).reap_all()

        assert [term.pid for term in reaped] == [100]
        assert reaped[0].job.command == "sleep 5"
        assert 100 not in registry
        assert capsys.readouterr().out == "100: /tmp/sleep 5 has terminated.\n"

    def test_reported_exactly_once(self, registry, fake_waitpid, capsys):
        registry.register(100, "sleep 5", "/tmp")
        fake_waitpid.exit(100)
        reaper = Reaper(registry, waitpid=fake_waitpid)
        reaper.reap_all()
        capsys.readouterr()

        assert reaper.reap_all() == []
        assert capsys.readouterr().out == ""

    def test_collects_every_exited_child(self, registry, fake_waitpid, capsys):
        registry.register(100, "sleep 5", "/tmp")
        registry.register(101, "sleep 10", "/tmp")
        registry.register(102, "sleep 15", "/tmp")
        fake_waitpid.exit(101)
        fake_waitpid.exit(100, code=3)
        reaped = Reaper(registry, waitpid=fake_waitpid).reap_all()

        assert [term.pid for term in reaped] == [101, 100]
        assert reaped[1].exit_code == 3
        assert [job.pid for job in registry.jobs()] == [102]
        out = capsys.readouterr().out.splitlines()
        assert out == [
            "101: /tmp/sleep 10 has terminated.",
            "100: /tmp/sleep 5 has terminated.",
        ]

    def test_untracked_child_is_consumed_silently(self, registry, fake_waitpid, capsys):
        registry.register(100, "sleep 5", "/tmp")
        fake_waitpid.exit(555)
        reaped = Reaper(registry, waitpid=fake_waitpid).reap_all()

        assert len(reaped) == 1
        assert reaped[0].pid == 555
        assert reaped[0].job is None
        assert fake_waitpid.exited == []
        assert 100 in registry
        assert capsys.readouterr().out == ""

    def test_stops_when_children_run_out(self, registry):
        waitpid = FakeWaitpid(running=False)
        waitpid.exit(100)
        reaped = Reaper(registry, waitpid=waitpid).reap_all()
        assert [term.pid for term in reaped] == [100]


class TestSweep:
    def test_ignores_registry(self, registry, fake_waitpid, capsys):
        registry.register(100, "sleep 5", "/tmp")
        fake_waitpid.exit(100)
        fake_waitpid.exit(200)
        count = Reaper(registry, waitpid=fake_waitpid).sweep()

        assert count == 2
        assert 100 in registry
        assert capsys.readouterr().out == ""

    def test_sweep_with_no_children(self, registry):
        assert Reaper(registry, waitpid=FakeWaitpid(running=False)).sweep() == 0
