import logging
import sqlite3

from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.label import MDLabel
from kivymd.uix.dialog import MDDialog
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.textfield import MDTextField
from kivymd.toast import toast
from kivy.metrics import dp
from kivy.properties import (
    BooleanProperty,
    NumericProperty,
    ObjectProperty,
    StringProperty,
)

from backend.catalog import EffortLevel, WorkoutDay


class ExerciseRow(MDBoxLayout):
    """One exercise with its set counter; layout lives in ``main.kv``."""

    screen = ObjectProperty(None)
    exercise_name = StringProperty("")
    sets_reps = StringProperty("")
    counter_text = StringProperty("")
    weight_text = StringProperty("")
    effort_text = StringProperty("")
    completed = NumericProperty(0)
    target = NumericProperty(0)
    is_complete = BooleanProperty(False)


class WorkoutScreen(MDScreen):
    """Active workout for one day: set counters, weights and the finish flow."""

    day_title = StringProperty("")
    progress_text = StringProperty("0/0")
    progress_value = NumericProperty(0)
    elapsed_text = StringProperty("0:00")
    is_started = BooleanProperty(False)
    tracker = ObjectProperty(None, allownone=True)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._rows: dict[str, ExerciseRow] = {}

    def load_day(self, day: WorkoutDay) -> None:
        app = MDApp.get_running_app()
        if self.tracker is not None:
            self.tracker.unbind(
                on_change=self.refresh,
                on_rest_prompt=self._on_rest_prompt,
                elapsed=self._on_elapsed,
            )
        self.tracker = app.get_tracker(day)
        self.tracker.bind(
            on_change=self.refresh,
            on_rest_prompt=self._on_rest_prompt,
            elapsed=self._on_elapsed,
        )
        self.day_title = day.short_title
        self.populate()

    def populate(self) -> None:
        box = self.ids.get("exercise_list")
        if box is None or self.tracker is None:
            return
        box.clear_widgets()
        self._rows = {}
        for category in self.tracker.categories:
            box.add_widget(
                MDLabel(
                    text=category.name,
                    theme_text_color="Secondary",
                    bold=True,
                    size_hint_y=None,
                    height=dp(32),
                )
            )
            for exercise in category.exercises:
                row = ExerciseRow(
                    screen=self,
                    exercise_name=exercise.name,
                    sets_reps=exercise.sets_reps_text,
                    target=exercise.sets,
                )
                self._rows[exercise.name] = row
                box.add_widget(row)
        self.refresh()

    def refresh(self, *args) -> None:
        tracker = self.tracker
        if tracker is None:
            return
        self.is_started = tracker.is_started
        self.progress_text = f"{tracker.completed_exercises_count}/{tracker.total_exercises}"
        self.progress_value = tracker.progress_ratio * 100
        self.elapsed_text = tracker.formatted_elapsed
        for name, row in self._rows.items():
            row.completed = tracker.completed(name)
            row.counter_text = f"{row.completed}/{row.target}"
            row.is_complete = tracker.is_exercise_complete(name)
            weight = tracker.weight_for(name)
            row.weight_text = f"{weight:g} kg" if weight > 0 else ""
            effort = tracker.efforts.get(name)
            row.effort_text = effort.title if effort is not None else ""

    def _on_elapsed(self, tracker, value) -> None:
        self.elapsed_text = tracker.formatted_elapsed

    def _on_rest_prompt(self, tracker, exercise_name) -> None:
        MDApp.get_running_app().show_rest_timer()

    # ------------------------------------------------------------------
    # Row actions
    # ------------------------------------------------------------------
    def start_workout(self) -> None:
        self.tracker.start()

    def complete_set(self, name: str) -> None:
        if not self.tracker.is_started:
            toast("Start the workout first")
            return
        self.tracker.complete_set(name)

    def decrement_set(self, name: str) -> None:
        self.tracker.decrement_set(name)

    def show_weight_dialog(self, name: str) -> None:
        if not self.tracker.is_started:
            return
        field = MDTextField(
            text=f"{self.tracker.weight_for(name):g}",
            hint_text="Weight, kg",
            input_filter="float",
        )
        dialog = None

        def save(*_args):
            try:
                self.tracker.set_weight(name, float(field.text or 0))
            except ValueError:
                toast("Enter a weight of 0 or more")
                return
            dialog.dismiss()

        dialog = MDDialog(
            title=name,
            type="custom",
            content_cls=field,
            buttons=[
                MDFlatButton(text="Cancel", on_release=lambda *_: dialog.dismiss()),
                MDRaisedButton(text="Save", on_release=save),
            ],
        )
        dialog.open()

    def show_effort_dialog(self, name: str) -> None:
        if not self.tracker.is_started:
            return
        dialog = None

        def choose(level):
            self.tracker.set_effort(name, level)
            dialog.dismiss()
            if level is not None:
                toast(level.hint)

        buttons = [
            MDFlatButton(text=level.title, on_release=lambda _b, lv=level: choose(lv))
            for level in EffortLevel
        ]
        buttons.append(MDFlatButton(text="Clear", on_release=lambda *_: choose(None)))
        dialog = MDDialog(title=f"How did {name} feel?", buttons=buttons)
        dialog.open()

    # ------------------------------------------------------------------
    # Finishing
    # ------------------------------------------------------------------
    def confirm_finish(self) -> None:
        tracker = self.tracker
        if tracker is None or not tracker.is_started:
            return
        dialog = None

        def do_finish(*_args):
            dialog.dismiss()
            try:
                record = tracker.finish(confirmed=True)
            except sqlite3.Error as exc:
                logging.exception("Saving workout failed")
                self._show_error(str(exc))
                return
            if record is not None:
                toast(f"Workout saved: {record.formatted_duration}")
            if self.manager:
                self.manager.current = "home"

        dialog = MDDialog(
            title="Finish workout?",
            text=(
                f"Completed {tracker.completed_exercises_count} of "
                f"{tracker.total_exercises} exercises"
            ),
            buttons=[
                MDRaisedButton(text="Cancel", on_release=lambda *_: dialog.dismiss()),
                MDRaisedButton(text="Finish", on_release=do_finish),
            ],
        )
        dialog.open()

    def confirm_discard(self) -> None:
        tracker = self.tracker
        if tracker is None or not tracker.is_started:
            return
        dialog = None

        def do_discard(*_args):
            dialog.dismiss()
            tracker.cancel()

        dialog = MDDialog(
            text="Discard this workout without saving?",
            buttons=[
                MDFlatButton(text="Cancel", on_release=lambda *_: dialog.dismiss()),
                MDFlatButton(text="Discard", on_release=do_discard),
            ],
        )
        dialog.open()

    def _show_error(self, message: str) -> None:
        dialog = MDDialog(
            title="Save Error",
            text=message,
            buttons=[MDRaisedButton(text="OK", on_release=lambda *_: dialog.dismiss())],
        )
        dialog.open()
