"""Unit tests for core infrastructure components."""
import pytest
from unittest.mock import Mock

from core.container import Container, Pending, Raw
from core.exceptions import InvalidArgumentError, ServiceError
from core.result import Success, Failure
from core.error_handler import log_failures, evaluate_service, timed, ErrorReporter


class TestContainer:
    """Tests for the plugin container."""

    def test_set_and_get_plain_value(self):
        # Arrange
        container = Container()
        value = {"name": "test"}

        # Act
        container.set("config", value)

        # Assert
        assert container.get("config") is value
        assert container.get("config") is value

    def test_service_is_evaluated_once_on_access(self):
        # Arrange
        container = Container()
        factory = Mock(return_value="created_instance")

        # Act
        container.set("service", factory)
        result1 = container.get("service")
        result2 = container.get("service")

        # Assert
        factory.assert_called_once_with()
        assert result1 == "created_instance"
        assert result1 is result2

    def test_run_evaluates_services_once(self):
        # Arrange
        container = Container()
        factory = Mock(return_value="booted")
        container.set("service", factory)

        # Act
        container.run()
        result = container.get("service")

        # Assert
        factory.assert_called_once_with()
        assert result == "booted"

    def test_run_leaves_plain_values_untouched(self):
        # Arrange
        container = Container()
        container.set("version", "1.0.0")

        # Act
        container.run()

        # Assert
        assert container.get("version") == "1.0.0"

    def test_run_twice_does_not_reevaluate(self):
        # Arrange
        container = Container()
        factory = Mock(return_value=1)
        container.set("service", factory)

        # Act
        container.run()
        container.run()

        # Assert
        factory.assert_called_once()

    def test_deferred_service_skips_run(self):
        # Arrange
        container = Container()
        factory = Mock(return_value="mailer")
        container.register_deferred("mailer", factory)

        # Act
        container.run()

        # Assert
        factory.assert_not_called()
        assert container.has("mailer")
        assert not container.is_resolved("mailer")

    def test_deferred_service_evaluated_once_on_access(self):
        # Arrange
        container = Container()
        factory = Mock(return_value="mailer")
        container.register_deferred("mailer", factory)
        container.run()

        # Act
        first = container.get("mailer")
        second = container.get("mailer")

        # Assert
        factory.assert_called_once_with()
        assert first == second == "mailer"

    def test_marker_prefix_registers_deferred_service(self):
        # Arrange
        container = Container()
        factory = Mock(return_value="mailer")

        # Act
        container["*mailer"] = factory
        container.run()

        # Assert
        factory.assert_not_called()
        assert "mailer" in container
        assert "*mailer" not in container
        assert container["mailer"] == "mailer"
        factory.assert_called_once()

    def test_marker_prefix_with_plain_value_is_stored_verbatim(self):
        # Arrange
        container = Container()

        # Act
        container["*x"] = 5

        # Assert
        assert container.get("*x") == 5
        assert not container.has("x")

    def test_marker_alone_registers_empty_key(self):
        # Arrange
        container = Container()
        factory = Mock(return_value="anonymous")

        # Act
        container["*"] = factory
        container.run()

        # Assert
        factory.assert_not_called()
        assert container.get("") == "anonymous"

    def test_custom_marker(self):
        # Arrange
        container = Container(marker="@")
        factory = Mock(return_value="lazy")

        # Act
        container["@lazy"] = factory
        container["*eager"] = Mock(return_value="eager")
        container.run()

        # Assert
        factory.assert_not_called()
        assert container.is_resolved("*eager")
        assert container["lazy"] == "lazy"

    @pytest.mark.parametrize("marker", ["", "**", None, 1])
    def test_invalid_marker_raises(self, marker):
        with pytest.raises(InvalidArgumentError):
            Container(marker=marker)

    def test_register_deferred_rejects_non_callable(self):
        # Arrange
        container = Container()

        # Assert
        with pytest.raises(InvalidArgumentError):
            container.register_deferred("answer", 42)
        assert not container.has("answer")

    def test_register_deferred_rejection_keeps_prior_value(self):
        # Arrange
        container = Container()
        container.set("answer", 41)

        # Act
        with pytest.raises(InvalidArgumentError):
            container.register_deferred("answer", 42)

        # Assert
        assert container.get("answer") == 41

    def test_none_key_appends(self):
        # Arrange
        container = Container()

        # Act
        container.set(None, "first")
        container[None] = "second"

        # Assert
        assert container.keys() == [0, 1]
        assert container[0] == "first"
        assert container[1] == "second"

    def test_append_continues_after_largest_integer_key(self):
        # Arrange
        container = Container()
        container[7] = "seven"

        # Act
        key = container.append("eight")

        # Assert
        assert key == 8
        assert container[8] == "eight"

    def test_append_does_not_reuse_deleted_index(self):
        # Arrange
        container = Container()
        container.append("a")
        container.append("b")

        # Act
        del container[1]
        key = container.append("c")

        # Assert
        assert key == 2

    def test_appended_service_is_evaluated_by_run(self):
        # Arrange
        container = Container()
        factory = Mock(return_value="value")
        key = container.append(factory)

        # Act
        container.run()

        # Assert
        factory.assert_called_once()
        assert container[key] == "value"

    def test_missing_key_returns_none(self):
        # Arrange
        container = Container()

        # Assert
        assert container.get("missing") is None
        assert container["missing"] is None
        assert container.get("missing", "fallback") == "fallback"
        assert not container.has("missing")

    def test_has_is_independent_of_evaluation(self):
        # Arrange
        container = Container()
        container.set("service", Mock(return_value=None))
        container.set("nothing", None)

        # Assert
        assert container.has("service")
        assert "nothing" in container

    def test_delete(self):
        # Arrange
        container = Container()
        container.set("key", "value")

        # Act
        container.delete("key")

        # Assert
        assert not container.has("key")
        assert container.get("key") is None

    def test_del_item_and_missing_delete(self):
        # Arrange
        container = Container()
        container["key"] = "value"

        # Act
        del container["key"]
        container.delete("never_set")

        # Assert
        assert "key" not in container
        assert len(container) == 0

    def test_delete_pending_service_never_evaluates_it(self):
        # Arrange
        container = Container()
        factory = Mock()
        container.set("service", factory)

        # Act
        container.delete("service")
        container.run()

        # Assert
        factory.assert_not_called()

    def test_failed_service_propagates_and_is_retried(self):
        # Arrange
        container = Container()
        factory = Mock(side_effect=[RuntimeError("boom"), "recovered"])
        container.set("flaky", factory)

        # Act / Assert
        with pytest.raises(RuntimeError, match="boom"):
            container.run()
        assert not container.is_resolved("flaky")
        assert container.get("flaky") == "recovered"
        assert factory.call_count == 2

    def test_run_failure_keeps_earlier_results(self):
        # Arrange
        container = Container()
        first = Mock(return_value="ok")
        container.set("first", first)
        container.set("broken", Mock(side_effect=ValueError("bad")))
        later = Mock(return_value="later")
        container.set("later", later)

        # Act
        with pytest.raises(ValueError):
            container.run()

        # Assert
        assert container.is_resolved("first")
        assert not container.is_resolved("broken")
        later.assert_not_called()
        with pytest.raises(ValueError):
            container.run()
        first.assert_called_once()

    def test_failed_deferred_access_is_retried(self):
        # Arrange
        container = Container()
        factory = Mock(side_effect=[KeyError("missing"), "mailer"])
        container.register_deferred("mailer", factory)

        # Act / Assert
        with pytest.raises(KeyError):
            container.get("mailer")
        assert container.get("mailer") == "mailer"

    def test_service_result_that_is_callable_is_not_invoked(self):
        # Arrange
        container = Container()
        inner = Mock(return_value="inner")
        container.set("factory_of_factory", lambda: inner)

        # Act
        container.run()
        result = container.get("factory_of_factory")

        # Assert
        assert result is inner
        inner.assert_not_called()

    def test_service_added_during_run_is_not_visited(self):
        # Arrange
        container = Container()
        late = Mock(return_value="late")

        def register_late():
            container.set("late", late)
            return "registrar"

        container.set("registrar", register_late)

        # Act
        container.run()

        # Assert
        late.assert_not_called()
        assert container.get("registrar") == "registrar"
        assert container.get("late") == "late"

    def test_service_removed_during_run_is_skipped(self):
        # Arrange
        container = Container()
        removed = Mock()

        def remover():
            container.delete("removed")
            return "done"

        container.set("remover", remover)
        container.set("removed", removed)

        # Act
        container.run()

        # Assert
        removed.assert_not_called()
        assert not container.has("removed")

    def test_entries_are_tagged(self):
        # Arrange
        container = Container()
        factory = Mock(return_value=3)
        container.set("raw", 1)
        container.set("eager", factory)
        container.register_deferred("lazy", factory)

        # Assert
        assert container._entries["raw"] == Raw(1)
        assert container._entries["eager"] == Pending(factory)
        assert container._entries["lazy"] == Pending(factory, deferred=True)

    def test_is_deferrable(self):
        container = Container()

        assert container.is_deferrable("*mailer", lambda: None)
        assert not container.is_deferrable("*mailer", "not callable")
        assert not container.is_deferrable("mailer", lambda: None)
        assert not container.is_deferrable("", lambda: None)
        assert not container.is_deferrable(None, lambda: None)

    def test_strip_marker(self):
        assert Container.strip_marker("*mailer") == "mailer"
        assert Container.strip_marker("*") == ""

    def test_iteration_yields_keys_without_evaluating(self):
        # Arrange
        container = Container()
        eager = Mock(return_value="eager")
        mailer = Mock(return_value="mailer")
        container["version"] = "1.0.0"
        container["admin_side"] = eager
        container["*mailer"] = mailer
        container.append(Mock())

        # Act
        keys = list(container)

        # Assert
        assert keys == ["version", "admin_side", "mailer", 0]
        assert keys == container.keys()
        eager.assert_not_called()
        mailer.assert_not_called()

    def test_iteration_over_empty_container_stops(self):
        assert list(Container()) == []

    def test_service_deleting_itself_stays_deleted(self):
        # Arrange
        container = Container()

        def self_removing():
            container.delete("svc")
            return "result"

        container.set("svc", self_removing)

        # Act
        container.run()

        # Assert
        assert not container.has("svc")

    def test_service_deleting_itself_on_access_returns_result(self):
        # Arrange
        container = Container()

        def self_removing():
            container.delete("mailer")
            return "mailer"

        container.register_deferred("mailer", self_removing)

        # Act
        result = container.get("mailer")

        # Assert
        assert result == "mailer"
        assert not container.has("mailer")

    def test_service_replacing_itself_keeps_replacement(self):
        # Arrange
        container = Container()

        def replacing():
            container.set("svc", "replacement")
            return "original"

        container.set("svc", replacing)

        # Act
        container.run()

        # Assert
        assert container.get("svc") == "replacement"

    def test_bool_key_advances_append_index(self):
        # Arrange
        container = Container()
        container[True] = "flag"

        # Act
        key = container.append("next")

        # Assert
        assert key == 2
        assert container[1] == "flag"
        assert container[2] == "next"

    def test_clear(self):
        # Arrange
        container = Container()
        container.set("service1", Mock())
        container.append("value")

        # Act
        container.clear()

        # Assert
        assert not container.has("service1")
        assert len(container) == 0
        assert container.append("again") == 0

    def test_plugin_scenario(self):
        # Arrange
        container = Container()
        print_fn = Mock(return_value=None)
        mail_fn = Mock(return_value="mailer")
        container.set("version", "1.0.0")
        container.set("admin_side", print_fn)
        container.register_deferred("mailer", mail_fn)

        # Act
        container.run()

        # Assert
        print_fn.assert_called_once()
        mail_fn.assert_not_called()
        assert container.get("version") == "1.0.0"
        assert container.get("mailer") == "mailer"
        mail_fn.assert_called_once()


class TestResult:
    """Tests for Result type."""

    def test_success(self):
        result = Success(42)

        assert result.is_success()
        assert not result.is_failure()
        assert result.unwrap() == 42

    def test_failure(self):
        error = ValueError("test error")
        result = Failure(error)

        assert result.is_failure()
        assert not result.is_success()
        assert result.error is error
        with pytest.raises(ValueError):
            result.unwrap()


class TestErrorHandlingHelpers:
    """Tests for failure reporting helpers."""

    def test_log_failures_passes_through_result(self):
        # Arrange
        @log_failures("Cleanup failed", logger_instance=Mock())
        def test_func():
            return "success"

        # Assert
        assert test_func() == "success"

    def test_log_failures_swallows_and_logs(self):
        # Arrange
        mock_logger = Mock()

        @log_failures("Cleanup failed", logger_instance=mock_logger, default_return="default")
        def test_func():
            raise ValueError("disk full")

        # Act
        result = test_func()

        # Assert
        assert result == "default"
        mock_logger.error.assert_called_once_with("Cleanup failed: ValueError: disk full")

    def test_log_failures_reraise(self):
        # Arrange
        @log_failures("Cleanup failed", logger_instance=Mock(), reraise=True)
        def test_func():
            raise ValueError("test error")

        # Assert
        with pytest.raises(ValueError):
            test_func()

    def test_evaluate_service_success(self):
        # Act
        result = evaluate_service(lambda: "mailer", key="mailer")

        # Assert
        assert result.unwrap() == "mailer"

    def test_evaluate_service_wraps_failure(self):
        # Arrange
        original = RuntimeError("smtp down")

        def load():
            raise original

        # Act
        result = evaluate_service(load, key="mailer")

        # Assert
        assert result.is_failure()
        assert isinstance(result.error, ServiceError)
        assert result.error.key == "mailer"
        assert result.error.__cause__ is original
        assert str(result.error) == "Service 'mailer' failed to load: smtp down"

    def test_evaluate_service_without_key(self):
        # Act
        result = evaluate_service(Mock(side_effect=ValueError("bad")), action="boot")

        # Assert
        assert str(result.error) == "Plugin failed to boot: bad"
        assert result.error.key is None

    def test_timed_logs_on_failure(self):
        # Arrange
        mock_logger = Mock()

        @timed(level="INFO", logger_instance=mock_logger)
        def test_func():
            raise RuntimeError("boom")

        # Act
        with pytest.raises(RuntimeError):
            test_func()

        # Assert
        mock_logger.info.assert_called_once()
        assert "took" in mock_logger.info.call_args[0][0]


class TestErrorReporter:
    """Tests for ErrorReporter."""

    def test_report_logs_and_returns_exit_code(self):
        # Arrange
        mock_logger = Mock()
        reporter = ErrorReporter(mock_logger)

        # Act
        code = reporter.report(ValueError("bad marker"), context="Configuration", exit_code=2)

        # Assert
        assert code == 2
        mock_logger.error.assert_called_once_with("Configuration failed: bad marker")
        mock_logger.debug.assert_not_called()

    def test_report_logs_cause(self):
        # Arrange
        mock_logger = Mock()
        reporter = ErrorReporter(mock_logger)
        error = evaluate_service(Mock(side_effect=KeyError("host")), key="mailer").error

        # Act
        code = reporter.report(error)

        # Assert
        assert code == 1
        mock_logger.error.assert_called_once_with(str(error))
        mock_logger.debug.assert_called_once()
        assert "KeyError" in mock_logger.debug.call_args[0][0]
