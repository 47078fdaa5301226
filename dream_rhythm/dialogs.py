import customtkinter as ctk

from .config import (
    DEFAULT_BEDTIME,
    DEFAULT_WAKE_TIME,
    MANUAL_MIN_HOURS,
    MANUAL_MAX_HOURS,
    MANUAL_STEP_HOURS,
    MANUAL_QUICK_PICKS,
)
from .store import SleepStore
from .utils import parse_hhmm, adjust_overnight, hours_between
from . import stats as engine

ACCENT = "#7b6cf6"
ERROR = "#e74c3c"
MUTED = "gray"

ONBOARDING_PAGES = (
    (
        "Restore your sleep rhythm",
        "Transform your nights into a journey of self-improvement and discover the power of quality rest.",
    ),
    (
        "Track your progress and wake up refreshed",
        "Monitor your sleep patterns, set goals, and celebrate every step toward better health.",
    ),
    (
        "Turn rest into a skill",
        "Master the art of sleep with gentle games, insights, and rewards that make bedtime "
        "something to look forward to.",
    ),
)


class _ModalDialog(ctk.CTkToplevel):
    def __init__(self, master, title: str, geometry: str):
        super().__init__(master)
        self.title(title)
        self.geometry(geometry)
        self.resizable(False, False)
        self.transient(master)
        # CTkToplevel needs a moment before it can take a grab
        self.after(100, self._grab)

    def _grab(self) -> None:
        try:
            self.grab_set()
            self.focus_force()
        except Exception:
            pass


class LogSleepDialog(_ModalDialog):
    """Bedtime and wake clock times for last night."""

    def __init__(self, master, store: SleepStore, on_saved=None):
        super().__init__(master, "Log Your Sleep", "360x360")
        self._store = store
        self._on_saved = on_saved

        ctk.CTkLabel(self, text="Log Your Sleep", font=("Roboto", 22, "bold")).pack(pady=(18, 2))
        ctk.CTkLabel(self, text="Track last night's rest", text_color=MUTED).pack(pady=(0, 12))

        form = ctk.CTkFrame(self)
        form.pack(padx=18, pady=6, fill="x")
        form.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(form, text="Bedtime (HH:MM)").grid(row=0, column=0, sticky="w", padx=12, pady=(12, 6))
        self.bedtime_entry = ctk.CTkEntry(form, width=90, justify="center")
        self.bedtime_entry.grid(row=0, column=1, sticky="e", padx=12, pady=(12, 6))
        self.bedtime_entry.insert(0, DEFAULT_BEDTIME)

        ctk.CTkLabel(form, text="Wake time (HH:MM)").grid(row=1, column=0, sticky="w", padx=12, pady=(0, 12))
        self.wake_entry = ctk.CTkEntry(form, width=90, justify="center")
        self.wake_entry.grid(row=1, column=1, sticky="e", padx=12, pady=(0, 12))
        self.wake_entry.insert(0, DEFAULT_WAKE_TIME)

        self.duration_label = ctk.CTkLabel(self, text="", font=("Arial", 18, "bold"))
        self.duration_label.pack(pady=(14, 2))
        self.verdict_label = ctk.CTkLabel(self, text="", text_color=MUTED)
        self.verdict_label.pack(pady=(0, 10))

        ctk.CTkButton(self, text="Save Sleep Entry", fg_color=ACCENT, command=self.save).pack(
            padx=18, pady=(6, 4), fill="x"
        )
        ctk.CTkButton(self, text="Cancel", fg_color="#555555", hover_color="#777777", command=self.destroy).pack(
            padx=18, pady=(0, 12), fill="x"
        )

        for entry in (self.bedtime_entry, self.wake_entry):
            entry.bind("<KeyRelease>", lambda _e: self._refresh_preview())
        self._refresh_preview()

    def _read_times(self):
        now = self._store.now()
        # Both pickers refer to today; the wake time rolls over when earlier than bedtime
        bedtime = parse_hhmm(self.bedtime_entry.get(), now)
        wake = parse_hhmm(self.wake_entry.get(), now)
        return bedtime, wake

    def _mark(self, entry, ok: bool) -> None:
        entry.configure(border_color=("#979da2", "#565b5e") if ok else ERROR)

    def _refresh_preview(self) -> None:
        try:
            bedtime, wake = self._read_times()
        except ValueError:
            self.duration_label.configure(text="--")
            self.verdict_label.configure(text="Enter times as HH:MM")
            return
        hours = max(0.0, hours_between(bedtime, adjust_overnight(bedtime, wake)))
        self.duration_label.configure(text=f"{hours:.1f} hours")
        if hours >= self._store.stats.sleep_goal:
            self.verdict_label.configure(text="Great job!")
        else:
            self.verdict_label.configure(text="Every hour counts!")

    def save(self) -> None:
        ok = True
        for entry in (self.bedtime_entry, self.wake_entry):
            try:
                parse_hhmm(entry.get(), self._store.now())
                self._mark(entry, True)
            except ValueError:
                self._mark(entry, False)
                ok = False
        if not ok:
            return

        bedtime, wake = self._read_times()
        stars = self._store.log_sleep(bedtime, wake)
        if self._on_saved is not None:
            self._on_saved(stars)
        self.destroy()


class ManualEntryDialog(_ModalDialog):
    """Slider for "how many hours did you sleep", ending now."""

    def __init__(self, master, store: SleepStore, on_saved=None):
        super().__init__(master, "Add Sleep Manually", "360x420")
        self._store = store
        self._on_saved = on_saved
        self._hours = 8.0

        ctk.CTkLabel(self, text="Add Sleep Manually", font=("Roboto", 22, "bold")).pack(pady=(18, 2))
        ctk.CTkLabel(self, text="How many hours did you sleep?", text_color=MUTED).pack(pady=(0, 12))

        self.hours_label = ctk.CTkLabel(self, text="", font=("Arial", 34, "bold"))
        self.hours_label.pack(pady=(4, 0))
        ctk.CTkLabel(self, text="hours", text_color=MUTED).pack()

        steps = int(round((MANUAL_MAX_HOURS - MANUAL_MIN_HOURS) / MANUAL_STEP_HOURS))
        self.slider = ctk.CTkSlider(
            self,
            from_=MANUAL_MIN_HOURS,
            to=MANUAL_MAX_HOURS,
            number_of_steps=steps,
            command=self._on_slide,
        )
        self.slider.pack(padx=24, pady=(12, 6), fill="x")

        picks = ctk.CTkFrame(self, fg_color="transparent")
        picks.pack(pady=(0, 8))
        for hours in MANUAL_QUICK_PICKS:
            ctk.CTkButton(
                picks,
                text=f"{int(hours)}h",
                width=56,
                command=lambda h=hours: self.set_hours(h),
            ).pack(side="left", padx=4)

        self.quality_label = ctk.CTkLabel(self, text="")
        self.quality_label.pack(pady=(4, 2))
        self.quality_bar = ctk.CTkProgressBar(self)
        self.quality_bar.pack(padx=24, pady=(0, 12), fill="x")

        ctk.CTkButton(self, text="Save Sleep Entry", fg_color=ACCENT, command=self.save).pack(
            padx=18, pady=(6, 4), fill="x"
        )
        ctk.CTkButton(self, text="Cancel", fg_color="#555555", hover_color="#777777", command=self.destroy).pack(
            padx=18, pady=(0, 12), fill="x"
        )

        self.set_hours(self._hours)

    def _on_slide(self, value) -> None:
        self._hours = round(float(value) / MANUAL_STEP_HOURS) * MANUAL_STEP_HOURS
        self._refresh()

    def set_hours(self, hours: float) -> None:
        self._hours = float(hours)
        self.slider.set(self._hours)
        self._refresh()

    def _refresh(self) -> None:
        goal = self._store.stats.sleep_goal
        self.hours_label.configure(text=f"{self._hours:.1f}")
        self.quality_label.configure(text=engine.QUALITY_LABELS[engine.quality_tier(self._hours, goal)])
        self.quality_bar.set(min(1.0, engine.quality_ratio(self._hours, goal)))

    def save(self) -> None:
        stars = self._store.log_manual_sleep(self._hours)
        if self._on_saved is not None:
            self._on_saved(stars)
        self.destroy()


class OnboardingDialog(_ModalDialog):
    def __init__(self, master, store: SleepStore):
        super().__init__(master, "Welcome", "380x300")
        self._store = store
        self._page = 0
        self.protocol("WM_DELETE_WINDOW", self.finish)

        self.title_label = ctk.CTkLabel(self, text="", font=("Roboto", 20, "bold"), wraplength=330)
        self.title_label.pack(padx=20, pady=(32, 12))
        self.body_label = ctk.CTkLabel(self, text="", wraplength=320, text_color=MUTED)
        self.body_label.pack(padx=20, pady=(0, 16))
        self.dots_label = ctk.CTkLabel(self, text="")
        self.dots_label.pack()

        self.next_btn = ctk.CTkButton(self, text="Next", fg_color=ACCENT, command=self.next_page)
        self.next_btn.pack(padx=20, pady=(16, 12), fill="x", side="bottom")
        self._show()

    def _show(self) -> None:
        title, body = ONBOARDING_PAGES[self._page]
        self.title_label.configure(text=title)
        self.body_label.configure(text=body)
        self.dots_label.configure(
            text="  ".join("●" if i == self._page else "○" for i in range(len(ONBOARDING_PAGES)))
        )
        last = self._page == len(ONBOARDING_PAGES) - 1
        self.next_btn.configure(text="Get Started" if last else "Next")

    def next_page(self) -> None:
        if self._page < len(ONBOARDING_PAGES) - 1:
            self._page += 1
            self._show()
        else:
            self.finish()

    def finish(self) -> None:
        self._store.complete_onboarding()
        self.destroy()
