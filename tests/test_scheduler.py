from earnings_ledger import scheduler as scheduler_module


class TestScheduler:

    def teardown_method(self):
        scheduler_module.shutdown_scheduler()

    def test_registers_settlement_sweep(self):
        sched = scheduler_module.init_scheduler()

        job = sched.get_job("refresh_settlement_statuses")
        assert job is not None
        assert job.name == "Release Settled Event Earnings"

    def test_init_is_idempotent(self):
        first = scheduler_module.init_scheduler()

        assert scheduler_module.init_scheduler() is first

    def test_shutdown_resets(self):
        scheduler_module.init_scheduler()
        scheduler_module.shutdown_scheduler()

        assert scheduler_module.scheduler is None
