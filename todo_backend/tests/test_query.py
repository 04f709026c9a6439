import copy
from datetime import datetime, timezone

from src.tasktrack.filters import filter_todos
from src.tasktrack.query import ListQuery, run_query
from src.tasktrack.sorting import sort_todos
from src.tasktrack.utils import DEFAULT_PAGE_SIZE, paginate

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_todo(title, **fields):
    todo = {
        "id": title,
        "title": title,
        "description": "",
        "completed": False,
        "priority": "medium",
        "due_date": None,
        "created_at": "2025-01-01T00:00:00+00:00",
    }
    todo.update(fields)
    return todo


def titles(todos):
    return [t["title"] for t in todos]


class TestFilter:
    def setup_method(self):
        self.todos = [
            make_todo("Buy milk", description="Two litres", priority="High"),
            make_todo("Café run", priority="low", completed=True),
            make_todo("Write report", description="Quarterly NUMBERS", priority="high", completed=True),
            make_todo("Call mom", priority="medium"),
        ]

    def test_search_title_or_description_case_insensitive(self):
        assert titles(filter_todos(self.todos, search="MILK")) == ["Buy milk"]
        assert titles(filter_todos(self.todos, search="numbers")) == ["Write report"]

    def test_search_does_not_fold_accents(self):
        assert filter_todos(self.todos, search="cafe") == []
        assert titles(filter_todos(self.todos, search="café")) == ["Café run"]

    def test_priority_matches_mixed_case_storage(self):
        assert titles(filter_todos(self.todos, priority="high")) == ["Buy milk", "Write report"]
        assert titles(filter_todos(self.todos, priority="HIGH")) == ["Buy milk", "Write report"]

    def test_status(self):
        assert titles(filter_todos(self.todos, status="completed")) == ["Café run", "Write report"]
        assert titles(filter_todos(self.todos, status="pending")) == ["Buy milk", "Call mom"]
        assert len(filter_todos(self.todos, status="everything")) == 4

    def test_pending_includes_records_without_flag(self):
        todo = make_todo("No flag")
        del todo["completed"]
        assert titles(filter_todos([todo], status="pending")) == ["No flag"]

    def test_predicates_compose_with_and(self):
        assert titles(filter_todos(self.todos, priority="high", status="pending")) == ["Buy milk"]
        assert filter_todos([], priority="high", status="pending") == []

    def test_empty_criteria_disable_predicates(self):
        assert len(filter_todos(self.todos, search="", priority="", status=None)) == 4

    def test_input_is_not_mutated(self):
        before = copy.deepcopy(self.todos)
        result = filter_todos(self.todos, priority="low")
        result.clear()
        assert self.todos == before


class TestSortByDueDate:
    def test_overdue_then_upcoming_then_dateless(self):
        todos = [
            make_todo("C"),
            make_todo("B", due_date="2025-06-16T00:00:00Z"),
            make_todo("A", due_date="2025-06-14T00:00:00Z"),
        ]
        assert titles(sort_todos(todos, "due_date", now=NOW)) == ["A", "B", "C"]

    def test_full_ordering(self):
        todos = [
            make_todo("none-1"),
            make_todo("upcoming-far", due_date="2025-06-20T00:00:00Z"),
            make_todo("overdue-long", due_date="2025-06-10T00:00:00Z"),
            make_todo("done-past", due_date="2025-06-01T00:00:00Z", completed=True),
            make_todo("none-2"),
            make_todo("upcoming-soon", due_date="2025-06-17T00:00:00Z"),
            make_todo("overdue-recent", due_date="2025-06-14T00:00:00Z"),
        ]
        assert titles(sort_todos(todos, "due_date", now=NOW)) == [
            "overdue-recent",
            "overdue-long",
            "done-past",
            "upcoming-soon",
            "upcoming-far",
            "none-1",
            "none-2",
        ]

    def test_unparseable_due_date_sorts_with_dateless(self):
        todos = [make_todo("bad", due_date="someday"), make_todo("dated", due_date="2025-07-01T00:00:00Z")]
        assert titles(sort_todos(todos, "due_date", now=NOW)) == ["dated", "bad"]

    def test_due_date_outside_utc_range_sorts_with_dateless(self):
        todos = [
            make_todo("edge-late", due_date="9999-12-31T23:00:00-05:00"),
            make_todo("edge-early", due_date="0001-01-01T00:00:00+05:00"),
            make_todo("dated", due_date="2025-07-01T00:00:00Z"),
        ]
        assert titles(sort_todos(todos, "due_date", now=NOW)) == ["dated", "edge-late", "edge-early"]

    def test_camel_case_alias(self):
        todos = [make_todo("later", due_date="2025-07-01T00:00:00Z"), make_todo("sooner", due_date="2025-06-20T00:00:00Z")]
        assert titles(sort_todos(todos, "dueDate", now=NOW)) == ["sooner", "later"]


class TestSortOtherKeys:
    def test_title_ignores_case_and_accents(self):
        todos = [make_todo(t) for t in ["banana", "Élan", "Apple", "cherry", "apple"]]
        assert titles(sort_todos(todos, "title")) == ["apple", "Apple", "banana", "cherry", "Élan"]

    def test_priority_highest_first_unknown_last(self):
        todos = [
            make_todo("l", priority="low"),
            make_todo("H1", priority="HIGH"),
            make_todo("m", priority="medium"),
            make_todo("u", priority="urgent"),
            make_todo("h2", priority="high"),
        ]
        assert titles(sort_todos(todos, "priority")) == ["H1", "h2", "m", "l", "u"]

    def test_created_at_newest_first_is_default(self):
        todos = [
            make_todo("old", created_at="2025-01-01T00:00:00+00:00"),
            make_todo("new", created_at="2025-03-01T00:00:00+00:00"),
            make_todo("mid", created_at="2025-02-01T00:00:00+00:00"),
        ]
        assert titles(sort_todos(todos)) == ["new", "mid", "old"]
        assert titles(sort_todos(todos, "createdAt")) == ["new", "mid", "old"]
        assert titles(sort_todos(todos, "bogus")) == ["new", "mid", "old"]

    def test_created_at_outside_utc_range_sorts_last(self):
        todos = [
            make_todo("edge", created_at="9999-12-31T23:00:00-05:00"),
            make_todo("old", created_at="2025-01-01T00:00:00+00:00"),
        ]
        assert titles(sort_todos(todos, "created_at")) == ["old", "edge"]

    def test_equal_keys_keep_input_order(self):
        todos = [make_todo(str(i)) for i in range(5)]
        assert titles(sort_todos(todos, "created_at")) == ["0", "1", "2", "3", "4"]
        assert titles(sort_todos(todos, "priority")) == ["0", "1", "2", "3", "4"]


class TestPaginate:
    def test_pages_reconstruct_collection(self):
        items = list(range(23))
        for limit in (1, 5, 7, 23, 50):
            first = paginate(items, 1, limit)
            rebuilt = []
            for page in range(1, first.meta.total_pages + 1):
                rebuilt.extend(paginate(items, page, limit).items)
            assert rebuilt == items

    def test_metadata(self):
        result = paginate(list(range(23)), 2, 5)
        assert result.items == [5, 6, 7, 8, 9]
        assert result.meta.as_dict() == {
            "current_page": 2,
            "total_pages": 5,
            "total_items": 23,
            "limit": 5,
            "has_next": True,
            "has_prev": True,
        }

    def test_empty_collection_has_zero_pages(self):
        result = paginate([], 1, 10)
        assert result.items == []
        assert result.meta.total_pages == 0
        assert result.meta.current_page == 1
        assert result.meta.has_next is False
        assert result.meta.has_prev is False

    def test_out_of_range_page_is_empty(self):
        result = paginate([1, 2, 3], 10, 2)
        assert result.items == []
        assert result.meta.has_next is False
        assert result.meta.has_prev is True

    def test_coercion(self):
        assert paginate([], "abc", 5).meta.current_page == 1
        assert paginate([], "0", 5).meta.current_page == 1
        assert paginate([], -3, 5).meta.current_page == 1
        assert paginate([], " 2 ", 5).meta.current_page == 2
        assert paginate([], 1, None).meta.limit == DEFAULT_PAGE_SIZE
        assert paginate([], 1, 0).meta.limit == DEFAULT_PAGE_SIZE
        assert paginate([], 1, "3").meta.limit == 3


class TestRunQuery:
    def test_filter_sort_paginate(self):
        todos = [
            make_todo("high one", priority="high"),
            make_todo("medium one", priority="medium"),
            make_todo("low one", priority="low"),
        ]
        medium = run_query(todos, ListQuery(priority="medium"))
        assert titles(medium.items) == ["medium one"]
        assert medium.meta.total_items == 1

        first_page = run_query(todos, ListQuery(page=1, limit=2, sort_by="priority"))
        assert titles(first_page.items) == ["high one", "medium one"]
        assert first_page.meta.has_next is True

    def test_defaults(self):
        result = run_query([make_todo("only")])
        assert result.meta.limit == DEFAULT_PAGE_SIZE
        assert titles(result.items) == ["only"]
