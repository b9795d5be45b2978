"""Tests for the Workflow mixin and its generated methods."""
import pytest
from tick_workflow import (
    NoTransitionAllowed,
    SpecificationBuilder,
    TransitionHalted,
    Workflow,
    WorkflowConfig,
    WorkflowError,
)


def review_spec():
    return (
        SpecificationBuilder()
        .state("draft")
        .event("submit", transitions_to="submitted")
        .state("submitted")
        .event("review", transitions_to="approved", guard=lambda doc, ok=False: ok)
        .event("review", transitions_to="rejected")
        .state("approved")
        .state("rejected")
        .build()
    )


class Document(Workflow):
    workflow_spec = review_spec()


class TestGeneratedMethods:
    def test_state_predicates(self):
        doc = Document()
        assert doc.is_draft() is True
        assert doc.is_submitted() is False
        assert doc.is_approved() is False

    def test_triggers(self):
        doc = Document()
        doc.trigger_submit()
        assert doc.is_submitted()
        assert doc.current_state.name == "submitted"

    def test_can_methods(self):
        doc = Document()
        assert doc.can_submit() is True
        assert doc.can_review() is False

    def test_can_for_missing_event_and_trigger_raises(self):
        doc = Document()
        doc.trigger_submit()
        assert doc.can_submit() is False
        with pytest.raises(NoTransitionAllowed):
            doc.trigger_submit()

    def test_can_evaluates_guards_without_args(self):
        """can_* passes no args, so the guarded variant is skipped."""
        doc = Document()
        doc.trigger_submit()
        assert doc.can_review() is True

    def test_generated_method_names(self):
        assert Document.is_draft.__name__ == "is_draft"
        assert Document.trigger_review.__name__ == "trigger_review"
        assert Document.can_review.__name__ == "can_review"


class TestReviewScenario:
    def test_review_approved(self):
        """Guarded review variant wins when its argument is true."""
        doc = Document()
        doc.trigger_submit()
        doc.trigger_review(True)
        assert doc.is_approved()

    def test_review_rejected(self):
        """Falsy argument falls through to the unguarded review variant."""
        doc = Document()
        doc.trigger_submit()
        doc.trigger_review(False)
        assert doc.is_rejected()

    def test_process_event_directly(self):
        doc = Document()
        assert doc.process_event("submit") == "submitted"
        assert doc.workflow_state == "submitted"


class TestPersistence:
    def test_default_column(self):
        doc = Document()
        assert doc.load_state() is None
        doc.trigger_submit()
        assert doc.workflow_state == "submitted"

    def test_custom_column(self):
        class Ticket(Workflow):
            workflow_config = WorkflowConfig(column="status")
            workflow_spec = review_spec()

        ticket = Ticket()
        ticket.trigger_submit()
        assert ticket.status == "submitted"
        assert not hasattr(ticket, "workflow_state")

    def test_column_inherited(self):
        class Ticket(Workflow):
            workflow_config = WorkflowConfig(column="status")
            workflow_spec = review_spec()

        class Bug(Ticket):
            pass

        bug = Bug()
        bug.trigger_submit()
        assert bug.status == "submitted"

    def test_loads_existing_state(self):
        doc = Document()
        doc.workflow_state = "approved"
        assert doc.is_approved()

    def test_unknown_stored_state_is_initial(self):
        doc = Document()
        doc.workflow_state = "archived"
        assert doc.is_draft()

    def test_overridden_persistence(self):
        store: dict[int, str] = {}

        class Stored(Workflow):
            workflow_spec = review_spec()

            def load_state(self):
                return store.get(id(self))

            def persist_state(self, new_state):
                store[id(self)] = new_state
                return True

        doc = Stored()
        assert doc.trigger_submit() is True
        assert store[id(doc)] == "submitted"
        assert doc.is_submitted()

    def test_method_callbacks_disabled_by_config(self):
        class Strict(Workflow):
            workflow_config = WorkflowConfig(method_callbacks=False)
            workflow_spec = review_spec()
            called = False

            def submit(self):
                self.called = True

        doc = Strict()
        doc.trigger_submit()
        assert doc.is_submitted()
        assert doc.called is False

    def test_write_initial_state(self):
        doc = Document()
        doc.write_initial_state()
        assert doc.workflow_state == "draft"


class TestHaltOnObject:
    def test_halt_from_before_transition(self):
        """obj.halt() inside before_transition keeps the object in its old state."""
        class Guarded(Workflow):
            workflow_spec = (
                SpecificationBuilder()
                .state("draft")
                .event("submit", transitions_to="submitted")
                .state("submitted")
                .before_transition(lambda obj, *args: obj.halt("locked"))
                .build()
            )

        doc = Guarded()
        assert doc.trigger_submit() is False
        assert doc.halted is True
        assert doc.halted_because == "locked"
        assert doc.is_draft()
        assert doc.load_state() is None

    def test_halt_from_method_action(self):
        """An event method can halt its own transition."""
        class Doc(Workflow):
            workflow_spec = review_spec()

            def submit(self):
                self.halt("incomplete")

        doc = Doc()
        assert doc.trigger_submit() is False
        assert doc.halted_because == "incomplete"
        assert doc.is_draft()

    def test_halt_now_raises(self):
        """halt_now from an event method raises and still records the reason."""
        class Doc(Workflow):
            workflow_spec = review_spec()

            def submit(self):
                self.halt_now("abort")

        doc = Doc()
        with pytest.raises(TransitionHalted):
            doc.trigger_submit()
        assert doc.halted is True
        assert doc.halted_because == "abort"
        assert doc.is_draft()

    def test_flags_cleared_by_next_transition(self):
        """A later successful transition resets halted and its reason."""
        class Doc(Workflow):
            workflow_spec = review_spec()
            ready = False

            def submit(self):
                if not self.ready:
                    self.halt("not ready")

        doc = Doc()
        doc.trigger_submit()
        assert doc.halted is True
        doc.ready = True
        doc.trigger_submit()
        assert doc.halted is False
        assert doc.halted_because is None
        assert doc.is_submitted()

    def test_flags_survive_no_transition_error(self):
        """NoTransitionAllowed leaves the previous halt flags readable."""
        class Doc(Workflow):
            workflow_spec = review_spec()

            def submit(self):
                self.halt("no")

        doc = Doc()
        doc.trigger_submit()
        with pytest.raises(NoTransitionAllowed):
            doc.trigger_review()
        assert doc.halted is True
        assert doc.halted_because == "no"

    def test_not_halted_before_any_transition(self):
        doc = Document()
        assert doc.halted is False
        assert doc.halted_because is None

    def test_on_error_halts_with_message(self):
        """Handled action errors halt with the error message as reason."""
        errors = []

        class Doc(Workflow):
            workflow_spec = (
                SpecificationBuilder()
                .state("draft")
                .event("submit", transitions_to="submitted")
                .state("submitted")
                .on_error(lambda obj, err, *args: errors.append(err))
                .build()
            )

            def submit(self):
                raise ValueError("missing title")

        doc = Doc()
        assert doc.trigger_submit() is False
        assert doc.halted is True
        assert doc.halted_because == "missing title"
        assert doc.is_draft()
        assert isinstance(errors[0], ValueError)

    def test_nested_transition_keeps_outer_flags(self):
        """A transition fired from an entry hook gets its own halt flags."""
        class Doc(Workflow):
            workflow_spec = (
                SpecificationBuilder()
                .state("a")
                .event("go", transitions_to="b")
                .state("b", on_entry=lambda obj, *args: obj.trigger_next())
                .event("next", transitions_to="c")
                .state("c")
                .build()
            )

        doc = Doc()
        doc.trigger_go()
        assert doc.is_c()
        assert doc.halted is False


class TestSpecLookup:
    def test_no_spec_declared(self):
        class Bare(Workflow):
            pass

        bare = Bare()
        assert bare.spec is None
        assert bare.current_state is None
        with pytest.raises(WorkflowError):
            bare.process_event("go")

    def test_instance_spec_overrides_class(self):
        doc = Document()
        doc.workflow_spec = (
            SpecificationBuilder().state("open").event("close", transitions_to="closed")
            .state("closed").build()
        )
        assert doc.current_state.name == "open"
        doc.process_event("close")
        assert doc.current_state.name == "closed"
        assert Document().current_state.name == "draft"

    def test_empty_spec(self):
        class Empty(Workflow):
            workflow_spec = SpecificationBuilder().build()

        empty = Empty()
        assert empty.current_state is None
        with pytest.raises(NoTransitionAllowed):
            empty.process_event("go")


class TestRedeclaration:
    def test_redeclare_on_same_class_replaces_methods(self):
        """Methods of the replaced spec disappear from the class."""
        # Arrange
        class Doc(Workflow):
            workflow_spec = review_spec()

        new_spec = (
            SpecificationBuilder()
            .state("open")
            .event("close", transitions_to="closed")
            .state("closed")
            .build()
        )

        # Act
        Doc.declare_workflow(new_spec)

        # Assert
        doc = Doc()
        assert Doc.workflow_spec is new_spec
        assert doc.is_open()
        assert doc.can_close()
        for name in ("is_draft", "is_submitted", "trigger_submit", "can_review"):
            assert not hasattr(doc, name)

    def test_subclass_spec_replaces_inherited(self):
        """A subclass spec hides the parent's generated methods."""
        class Base(Workflow):
            workflow_spec = review_spec()

        class Child(Base):
            workflow_spec = (
                SpecificationBuilder()
                .state("draft")
                .event("publish", transitions_to="published")
                .state("published")
                .build()
            )

        child = Child()
        assert child.is_draft()
        assert child.can_publish()
        assert not hasattr(child, "is_submitted")
        assert not hasattr(child, "trigger_submit")
        assert not hasattr(Child, "can_review")
        with pytest.raises(AttributeError):
            child.trigger_review()

        base = Base()
        assert base.can_submit()
        assert not hasattr(base, "can_publish")

    def test_subclass_without_spec_inherits(self):
        class Child(Document):
            pass

        child = Child()
        child.trigger_submit()
        assert child.is_submitted()

    def test_redeclare_restores_removed_names(self):
        class Base(Workflow):
            workflow_spec = review_spec()

        class Child(Base):
            workflow_spec = SpecificationBuilder().state("other").build()

        assert not hasattr(Child(), "is_draft")
        Child.declare_workflow(review_spec())
        assert Child().is_draft()


class TestCallbackLookup:
    def test_protected_flag_named_like_event(self):
        """A plain _<event> class attribute is skipped, the transition proceeds."""
        class Order(Workflow):
            workflow_spec = (
                SpecificationBuilder()
                .state("packed")
                .event("ship", transitions_to="shipped")
                .state("shipped")
                .build()
            )
            _ship = True

        order = Order()
        assert order.trigger_ship() == "shipped"
        assert order.is_shipped()
