from sqlalchemy import MetaData

from aion.taskstore.db.schema import build_tables
from aion.taskstore.db.statements import TaskStoreStatements


class TestBuildTables:
    """Tests for build_tables."""

    def test_default_prefix(self):
        tables = build_tables()
        assert tables.tasks.name == "a2a_tasks"
        assert tables.history.name == "a2a_history"
        assert tables.artifacts.name == "a2a_artifacts"
        assert tables.prefix == "a2a_"

    def test_custom_and_empty_prefix(self):
        assert build_tables("agent_").tasks.name == "agent_tasks"
        assert build_tables("").tasks.name == "tasks"
        assert build_tables(None).prefix == ""

    def test_children_cascade_on_task_delete(self):
        tables = build_tables("x_")
        for child in (tables.history, tables.artifacts):
            (fk,) = child.foreign_keys
            assert fk.target_fullname == "x_tasks.task_id"
            assert fk.ondelete == "CASCADE"
            assert [c.name for c in child.primary_key.columns] == ["task_id", "sequence_num"]

    def test_two_prefixes_share_metadata(self):
        metadata = MetaData()
        build_tables("a_", metadata)
        build_tables("b_", metadata)
        assert {"a_tasks", "b_tasks", "a_history", "b_artifacts"} <= set(metadata.tables)


class TestStatements:
    """Tests for TaskStoreStatements."""

    def test_statements_use_prefixed_tables(self):
        statements = TaskStoreStatements.from_tables(build_tables("agent_"))

        assert statements.tasks_table == "agent_tasks"
        assert "agent_tasks" in str(statements.insert_task)
        assert "agent_history" in str(statements.insert_history)
        assert "agent_artifacts" in str(statements.select_artifacts)

    def test_finalizing_update_keeps_first_instant(self):
        statements = TaskStoreStatements.from_tables(build_tables())

        assert "COALESCE(finalized_at, :finalized_at)" in str(statements.update_task_finalizing)
        assert "finalized_at = NULL" in str(statements.update_task_active)
