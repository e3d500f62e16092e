from datetime import datetime

from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen
from kivymd.uix.list import OneLineListItem
from kivy.properties import ListProperty, StringProperty

from backend import stats


class ProgressScreen(MDScreen):
    """Period summary and per-exercise weight progression."""

    period = StringProperty(stats.TimePeriod.MONTH.value)
    workouts = StringProperty("0")
    average_duration = StringProperty("0 min")
    completion = StringProperty("0%")
    regularity = StringProperty("0%")
    total_time = StringProperty("0m")
    activity = StringProperty("")
    exercise_names = ListProperty([])
    selected_exercise = StringProperty("")
    weight_change = StringProperty("")

    def on_pre_enter(self, *args):
        self.populate()
        return super().on_pre_enter(*args)

    def set_period(self, value: str) -> None:
        self.period = value
        self.populate()

    def select_exercise(self, name: str) -> None:
        self.selected_exercise = name
        self.populate_weights()

    def populate(self) -> None:
        history = MDApp.get_running_app().history
        now = datetime.now()
        period = stats.TimePeriod(self.period)
        sessions = stats.filter_sessions(history.get_sessions(), period, now)
        self.workouts = str(len(sessions))
        self.average_duration = f"{stats.average_duration_minutes(sessions)} min"
        self.completion = f"{stats.completion_rate(sessions)}%"
        self.regularity = f"{stats.regularity_rate(sessions, period)}%"
        self.total_time = stats.format_total_time(sessions)
        self.activity = "".join(
            "●" if worked else "○" for _day, worked in stats.activity_days(sessions, now)
        )
        self.exercise_names = stats.exercise_names_with_weight(
            history.get_completed_exercises()
        )
        if self.selected_exercise not in self.exercise_names:
            self.selected_exercise = self.exercise_names[0] if self.exercise_names else ""
        self.populate_weights()

    def populate_weights(self) -> None:
        lst = self.ids.get("weight_list")
        if not lst:
            return
        lst.clear_widgets()
        if not self.selected_exercise:
            self.weight_change = ""
            return
        records = MDApp.get_running_app().history.get_completed_exercises(
            exercise_name=self.selected_exercise
        )
        points = stats.weight_progression(records, self.selected_exercise)
        for point in points:
            lst.add_widget(
                OneLineListItem(text=f"{point.date:%d/%m/%Y}: {point.weight:g} kg")
            )
        change = stats.weight_change(points)
        self.weight_change = f"{change:+g} kg" if len(points) > 1 else ""
