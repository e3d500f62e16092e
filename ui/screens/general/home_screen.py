from datetime import datetime

from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen
from kivymd.uix.dialog import MDDialog
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.list import ThreeLineListItem
from kivy.properties import StringProperty

from backend import stats
from backend.catalog import WorkoutDay, total_exercises


class HomeScreen(MDScreen):
    """Day picker with this week's summary and the resume prompt."""

    week_sessions = StringProperty("0")
    week_minutes = StringProperty("0m")
    _resume_offered = False

    def on_pre_enter(self, *args):
        self.populate()
        return super().on_pre_enter(*args)

    def on_enter(self, *args):
        """Offer to continue a workout interrupted by the app being closed."""
        if not self._resume_offered:
            self._resume_offered = True
            days = MDApp.get_running_app().interrupted_days()
            if days:
                self._show_resume_dialog(days[0])
        return super().on_enter(*args)

    def populate(self) -> None:
        app = MDApp.get_running_app()
        sessions = app.history.get_sessions()
        now = datetime.now()
        self.week_sessions = str(stats.sessions_this_week(sessions, now))
        self.week_minutes = stats.format_total_time(
            s for s in sessions if s.date >= stats.start_of_week(now)
        )
        lst = self.ids.get("day_list")
        if not lst:
            return
        lst.clear_widgets()
        today = WorkoutDay.for_weekday(now.isoweekday())
        for day in WorkoutDay:
            last = app.history.last_session(day.value)
            last_text = (
                f"Last: {last.date:%d/%m} • {last.formatted_duration}"
                if last
                else "Not done yet"
            )
            title = day.title + ("  • today" if day is today else "")
            lst.add_widget(
                ThreeLineListItem(
                    text=title,
                    secondary_text=f"{total_exercises(day)} exercises",
                    tertiary_text=last_text,
                    on_release=lambda _item, d=day: app.open_workout(d),
                )
            )

    def _show_resume_dialog(self, day: WorkoutDay) -> None:
        app = MDApp.get_running_app()
        dialog = None

        def resume(*_args):
            dialog.dismiss()
            app.open_workout(day)

        def discard(*_args):
            dialog.dismiss()
            app.get_tracker(day).cancel()

        dialog = MDDialog(
            title="Resume workout?",
            text=f"An unfinished {day.short_title} workout was found.",
            buttons=[
                MDFlatButton(text="Discard", on_release=discard),
                MDRaisedButton(text="Resume", on_release=resume),
            ],
        )
        dialog.open()
