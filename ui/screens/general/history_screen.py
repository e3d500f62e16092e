from kivymd.app import MDApp
from kivymd.uix.screen import MDScreen
from kivymd.uix.dialog import MDDialog
from kivymd.uix.button import MDFlatButton
from kivymd.uix.list import IconRightWidget, TwoLineRightIconListItem
from kivy.properties import StringProperty

from backend import stats
from backend.catalog import WorkoutDay


class HistoryScreen(MDScreen):
    """List of finished workouts; each can be deleted individually."""

    total_sessions = StringProperty("0")
    total_time = StringProperty("0m")
    week_sessions = StringProperty("0")

    def on_pre_enter(self, *args):
        self.populate()
        return super().on_pre_enter(*args)

    def populate(self) -> None:
        sessions = MDApp.get_running_app().history.get_sessions()
        self.total_sessions = str(len(sessions))
        self.total_time = stats.format_total_time(sessions)
        self.week_sessions = str(stats.sessions_this_week(sessions))
        lst = self.ids.get("history_list")
        if not lst:
            return
        lst.clear_widgets()
        for session in sessions:
            try:
                title = WorkoutDay(session.workout_day).title
            except ValueError:
                title = session.workout_day
            status = "done" if session.is_completed else (
                f"{session.completed_exercises}/{session.total_exercises}"
            )
            item = TwoLineRightIconListItem(
                text=title,
                secondary_text=(
                    f"{session.date:%H:%M %a %d/%m/%Y} • "
                    f"{session.formatted_duration} • {status}"
                ),
            )
            item.add_widget(
                IconRightWidget(
                    icon="delete",
                    on_release=lambda _w, sid=session.id: self.confirm_delete(sid),
                )
            )
            lst.add_widget(item)

    def confirm_delete(self, session_id: int) -> None:
        dialog = None

        def do_delete(*_args):
            dialog.dismiss()
            MDApp.get_running_app().history.delete_session(session_id)
            self.populate()

        dialog = MDDialog(
            text="Delete this workout from the history?",
            buttons=[
                MDFlatButton(text="Cancel", on_release=lambda *_: dialog.dismiss()),
                MDFlatButton(text="Delete", on_release=do_delete),
            ],
        )
        dialog.open()
