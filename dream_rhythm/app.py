import time
from tkinter import messagebox

import customtkinter as ctk

from .config import (
    APP_TITLE,
    APPDATA_DIR,
    STORE_FILE,
    WINDOW_GEOMETRY,
    GAME_WIDTH,
    GAME_HEIGHT,
    GAME_FRAME_MS,
    SESSION_REFRESH_MS,
    DEFAULT_WINDOW_DAYS,
    MONTH_WINDOW_DAYS,
    MOON_RADIUS,
    BUBBLE_RADIUS,
    GAME_LIVES,
)
from .utils import ensure_dir, format_hours, format_time, format_day, constellation_points
from .logging_setup import setup_logger
from .storage import JsonKeyValueStore
from .store import SleepStore
from .game import CatchTheZzz, GameState
from .dialogs import LogSleepDialog, ManualEntryDialog, OnboardingDialog, ACCENT, MUTED
from .tray import TrayController


ctk.set_appearance_mode("Dark")
ctk.set_default_color_theme("blue")

NIGHT = "#101430"
MOON = "#f6e7b4"
ZZZ = "#9b8cff"
GOOD = "#2ecc71"

TIMEFRAMES = {"7 Days": DEFAULT_WINDOW_DAYS, "30 Days": MONTH_WINDOW_DAYS}


class DreamRhythmApp:
    def __init__(self, store: SleepStore | None = None):
        ensure_dir(APPDATA_DIR)

        self.logger = setup_logger()
        self.logger.info("App start")

        self.store = store or SleepStore(JsonKeyValueStore(STORE_FILE, self.logger), self.logger)
        self.store.subscribe(self._on_store_changed)

        self.root = ctk.CTk()
        self.root.title(APP_TITLE)
        self.root.geometry(WINDOW_GEOMETRY)
        self.root.minsize(420, 700)
        self.root.protocol("WM_DELETE_WINDOW", self.hide_to_tray)

        self.game = CatchTheZzz(GAME_WIDTH, GAME_HEIGHT, on_game_over=self._on_game_over, logger=self.logger)
        self._game_job = None
        self._game_last_mono = 0.0
        self._session_job = None
        self._timeframe = DEFAULT_WINDOW_DAYS

        self.tray = TrayController(
            title=APP_TITLE,
            on_show=self.show_from_tray,
            on_quit=self.quit_app,
            logger=self.logger,
        )

        self._build_ui()
        self._refresh_all()
        self._schedule_session_refresh()

        if not self.store.has_completed_onboarding:
            self.root.after(300, lambda: OnboardingDialog(self.root, self.store))

    # UI
    def _build_ui(self) -> None:
        self.header = ctk.CTkLabel(self.root, text=APP_TITLE, font=("Roboto", 26, "bold"))
        self.header.pack(pady=(14, 4))

        self.tabs = ctk.CTkTabview(self.root, command=self._on_tab_changed)
        self.tabs.pack(padx=12, pady=(0, 12), fill="both", expand=True)
        for name in ("Home", "Insights", "Game", "Settings"):
            self.tabs.add(name)

        self._build_home(self.tabs.tab("Home"))
        self._build_insights(self.tabs.tab("Insights"))
        self._build_game(self.tabs.tab("Game"))
        self._build_settings(self.tabs.tab("Settings"))

    def _build_home(self, tab) -> None:
        # Idle view
        self.frame_idle = ctk.CTkFrame(tab)
        self.today_label = ctk.CTkLabel(self.frame_idle, text="0.0 hours today", font=("Arial", 22, "bold"))
        self.today_label.pack(padx=12, pady=(16, 2))
        self.today_goal_label = ctk.CTkLabel(self.frame_idle, text="Goal: 8h", text_color=MUTED)
        self.today_goal_label.pack(padx=12, pady=(0, 6))
        self.today_bar = ctk.CTkProgressBar(self.frame_idle)
        self.today_bar.pack(padx=18, pady=(0, 12), fill="x")
        self.today_bar.set(0.0)

        ctk.CTkButton(self.frame_idle, text="Start Sleep", fg_color=ACCENT, command=self.start_sleep).pack(
            padx=12, pady=(0, 6), fill="x"
        )
        ctk.CTkButton(self.frame_idle, text="Log Bedtime & Wake", command=self.open_log_dialog).pack(
            padx=12, pady=(0, 6), fill="x"
        )
        ctk.CTkButton(
            self.frame_idle,
            text="Add Sleep Manually",
            fg_color="#555555",
            hover_color="#777777",
            command=self.open_manual_dialog,
        ).pack(padx=12, pady=(0, 14), fill="x")

        # Sleeping view
        self.frame_sleeping = ctk.CTkFrame(tab, fg_color="#1d2147")
        ctk.CTkLabel(self.frame_sleeping, text="Sleeping...", font=("Arial", 20, "bold")).pack(pady=(16, 4))
        self.session_duration_label = ctk.CTkLabel(self.frame_sleeping, text="0m", font=("Arial", 30, "bold"))
        self.session_duration_label.pack(pady=2)
        self.session_started_label = ctk.CTkLabel(self.frame_sleeping, text="", text_color=MUTED)
        self.session_started_label.pack(pady=(0, 10))
        row = ctk.CTkFrame(self.frame_sleeping, fg_color="transparent")
        row.pack(padx=12, pady=(0, 14), fill="x")
        ctk.CTkButton(
            row, text="Cancel", fg_color="#555555", hover_color="#777777", command=self.cancel_sleep
        ).pack(side="left", expand=True, fill="x", padx=(0, 6))
        ctk.CTkButton(row, text="Wake Up", fg_color=ACCENT, command=self.wake_up).pack(
            side="left", expand=True, fill="x", padx=(6, 0)
        )

        # Goal stepper
        self.frame_goal = ctk.CTkFrame(tab)
        self.frame_goal.pack(padx=6, pady=8, fill="x", side="bottom")
        ctk.CTkLabel(self.frame_goal, text="Sleep Goal", font=("Arial", 16, "bold")).grid(
            row=0, column=0, columnspan=3, sticky="w", padx=12, pady=(10, 4)
        )
        self.goal_down_btn = ctk.CTkButton(self.frame_goal, text="-", width=44, command=lambda: self.step_goal(-1))
        self.goal_down_btn.grid(row=1, column=0, padx=12, pady=(0, 12))
        self.goal_label = ctk.CTkLabel(self.frame_goal, text="8.0 hours", font=("Arial", 18, "bold"))
        self.goal_label.grid(row=1, column=1, pady=(0, 12))
        self.goal_up_btn = ctk.CTkButton(self.frame_goal, text="+", width=44, command=lambda: self.step_goal(1))
        self.goal_up_btn.grid(row=1, column=2, padx=12, pady=(0, 12))
        self.frame_goal.grid_columnconfigure(1, weight=1)

        self.home_stars_label = ctk.CTkLabel(tab, text="", text_color=MOON, font=("Arial", 15, "bold"))
        self.home_stars_label.pack(side="bottom", pady=(4, 0))

    def _build_insights(self, tab) -> None:
        ctk.CTkLabel(tab, text="Progress & Trends", font=("Arial", 18, "bold")).pack(anchor="w", padx=8, pady=(6, 0))
        self.timeframe_switch = ctk.CTkSegmentedButton(
            tab, values=list(TIMEFRAMES), command=self._on_timeframe_changed
        )
        self.timeframe_switch.pack(padx=8, pady=8, fill="x")
        self.timeframe_switch.set("7 Days")

        grid = ctk.CTkFrame(tab)
        grid.pack(padx=8, pady=4, fill="x")
        self.insight_labels = {}
        for i, key in enumerate(("Average Sleep", "Current Streak", "Longest Streak", "Dream Stars")):
            cell = ctk.CTkFrame(grid)
            cell.grid(row=i // 2, column=i % 2, padx=6, pady=6, sticky="nsew")
            ctk.CTkLabel(cell, text=key, text_color=MUTED).pack(padx=10, pady=(8, 0))
            value = ctk.CTkLabel(cell, text="-", font=("Arial", 18, "bold"))
            value.pack(padx=10, pady=(0, 8))
            self.insight_labels[key] = value
        grid.grid_columnconfigure(0, weight=1)
        grid.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(tab, text="Sleep Hours Trend", anchor="w").pack(fill="x", padx=8, pady=(8, 2))
        self.chart = ctk.CTkCanvas(tab, height=150, bg=NIGHT, highlightthickness=0)
        self.chart.pack(padx=8, pady=(0, 6), fill="x")

        self.constellation = ctk.CTkCanvas(tab, height=220, bg=NIGHT, highlightthickness=0)
        self.constellation.pack(padx=8, pady=(0, 6), fill="x")

        self.history_box = ctk.CTkTextbox(tab, height=100)
        self.history_box.pack(padx=8, pady=(0, 8), fill="both", expand=True)
        self.history_box.configure(state="disabled")

    def _build_game(self, tab) -> None:
        top = ctk.CTkFrame(tab, fg_color="transparent")
        top.pack(fill="x", padx=6)
        self.game_score_label = ctk.CTkLabel(top, text="★ 0", font=("Arial", 16, "bold"))
        self.game_score_label.pack(side="left")
        self.game_lives_label = ctk.CTkLabel(top, text="", text_color="#e74c3c", font=("Arial", 16))
        self.game_lives_label.pack(side="right")

        self.canvas = ctk.CTkCanvas(tab, width=GAME_WIDTH, height=GAME_HEIGHT, bg=NIGHT, highlightthickness=0)
        self.canvas.pack(padx=6, pady=6, fill="both", expand=True)
        self.canvas.bind("<Configure>", self._on_canvas_resize)
        self.canvas.bind("<ButtonPress-1>", self._on_drag)
        self.canvas.bind("<B1-Motion>", self._on_drag)

        self.game_btn_row = ctk.CTkFrame(tab, fg_color="transparent")
        self.game_btn_row.pack(fill="x", padx=6, pady=(0, 6))
        self.game_primary_btn = ctk.CTkButton(self.game_btn_row, text="Start Dreaming", fg_color=ACCENT, command=self.start_game)
        self.game_primary_btn.pack(side="left", expand=True, fill="x", padx=(0, 4))
        self.game_menu_btn = ctk.CTkButton(
            self.game_btn_row,
            text="Back to Menu",
            fg_color="#555555",
            hover_color="#777777",
            command=self.game_back_to_menu,
        )

    def _build_settings(self, tab) -> None:
        ctk.CTkLabel(tab, text="Settings", font=("Arial", 18, "bold")).pack(anchor="w", padx=8, pady=(6, 0))
        ctk.CTkLabel(tab, text="Customize your Dream Rhythm experience", text_color=MUTED).pack(anchor="w", padx=8)

        self.frame_collection = ctk.CTkFrame(tab)
        self.frame_collection.pack(padx=8, pady=12, fill="x")
        ctk.CTkLabel(self.frame_collection, text="Dream Stars Collection", font=("Arial", 15, "bold")).grid(
            row=0, column=0, columnspan=3, sticky="w", padx=12, pady=(10, 4)
        )
        self.collection_labels = {}
        for col, key in enumerate(("Total Stars", "Day Streak", "Nights Logged")):
            value = ctk.CTkLabel(self.frame_collection, text="0", font=("Arial", 20, "bold"))
            value.grid(row=1, column=col, padx=8)
            ctk.CTkLabel(self.frame_collection, text=key, text_color=MUTED).grid(row=2, column=col, padx=8, pady=(0, 10))
            self.collection_labels[key] = value
            self.frame_collection.grid_columnconfigure(col, weight=1)

        frame_reset = ctk.CTkFrame(tab, fg_color="#3a2323")
        frame_reset.pack(padx=8, pady=8, fill="x")
        ctk.CTkLabel(frame_reset, text="Clear all sleep data and start fresh", anchor="w").pack(
            fill="x", padx=12, pady=(12, 6)
        )
        ctk.CTkButton(
            frame_reset,
            text="Reset Progress",
            fg_color="#c0392b",
            hover_color="#e74c3c",
            command=self.confirm_reset,
        ).pack(padx=12, pady=(0, 12), fill="x")

        about = ctk.CTkFrame(tab)
        about.pack(padx=8, pady=8, fill="x")
        ctk.CTkLabel(about, text="About Dream Rhythm", font=("Arial", 15, "bold")).pack(anchor="w", padx=12, pady=(10, 2))
        ctk.CTkLabel(
            about,
            text="Dream Rhythm helps you develop healthy sleep habits through tracking, "
            "insights, and relaxing mini-games.",
            wraplength=360,
            justify="left",
            text_color=MUTED,
        ).pack(anchor="w", padx=12, pady=(0, 12))

        self.footer = ctk.CTkLabel(
            tab,
            text='Tip: Click "X" to hide to tray. Use tray menu to show or quit.',
            text_color=MUTED,
        )
        self.footer.pack(side="bottom", pady=(0, 8))

    # Store wiring
    def _on_store_changed(self) -> None:
        self.root.after(0, self._refresh_all)

    def _refresh_all(self) -> None:
        self._refresh_home()
        self._refresh_insights()
        self._refresh_settings()

    def _refresh_home(self) -> None:
        s = self.store.stats
        if self.store.is_sleeping:
            self.frame_idle.pack_forget()
            self.frame_sleeping.pack(padx=6, pady=8, fill="x")
            self.session_started_label.configure(
                text=f"Started at {format_time(self.store.active_session.start_time)}"
            )
            self._refresh_session_duration()
        else:
            self.frame_sleeping.pack_forget()
            self.frame_idle.pack(padx=6, pady=8, fill="x")
            self.today_label.configure(text=f"{self.store.todays_hours():.1f} hours today")
            self.today_goal_label.configure(text=f"Goal: {s.sleep_goal:.0f}h")
            self.today_bar.set(self.store.goal_progress())

        self.goal_label.configure(text=f"{s.sleep_goal:.1f} hours")
        self.goal_down_btn.configure(state="normal" if self.store.can_step_goal(-1) else "disabled")
        self.goal_up_btn.configure(state="normal" if self.store.can_step_goal(1) else "disabled")
        self.home_stars_label.configure(text=f"★ {s.dream_stars} Dream Stars Collected" if s.dream_stars > 0 else "")

    def _refresh_session_duration(self) -> None:
        self.session_duration_label.configure(text=format_hours(self.store.current_session_hours()))

    def _schedule_session_refresh(self) -> None:
        if self.store.is_sleeping:
            self._refresh_session_duration()
        self._session_job = self.root.after(SESSION_REFRESH_MS, self._schedule_session_refresh)

    def _refresh_insights(self) -> None:
        s = self.store.stats
        days = self._timeframe
        self.insight_labels["Average Sleep"].configure(text=f"{self.store.average_hours(days):.1f} hrs")
        self.insight_labels["Current Streak"].configure(text=f"{s.current_streak} days")
        self.insight_labels["Longest Streak"].configure(text=f"{s.longest_streak} days")
        self.insight_labels["Dream Stars"].configure(text=str(s.dream_stars))

        recent = self.store.recent_records(days)
        self._draw_chart(recent, s.sleep_goal)
        self._draw_constellation(s.dream_stars)

        lines = [f"Last {days} nights:", ""]
        if not recent:
            lines.append("(no sleep data yet)")
        else:
            for r in reversed(recent):
                lines.append(
                    f"{format_day(r.date)}  |  {r.hours:.1f} h  |  "
                    f"{format_time(r.bedtime)} - {format_time(r.wake_time)}"
                )
        content = "\n".join(lines)
        self.history_box.configure(state="normal")
        self.history_box.delete("1.0", "end")
        self.history_box.insert("1.0", content)
        self.history_box.configure(state="disabled")

    def _draw_chart(self, records, goal: float) -> None:
        c = self.chart
        c.delete("all")
        w = max(1, c.winfo_width())
        h = max(1, int(c.cget("height")))
        pad = 14
        if not records:
            c.create_text(w / 2, h / 2, text="No sleep data yet", fill="gray")
            return

        top = max(max(r.hours for r in records), goal) or 1.0

        def y_for(hours: float) -> float:
            return h - pad - (hours / top) * (h - 2 * pad)

        gy = y_for(goal)
        c.create_line(pad, gy, w - pad, gy, fill=GOOD, dash=(4, 3))
        spacing = (w - 2 * pad) / max(len(records) - 1, 1)
        points = []
        for i, r in enumerate(records):
            x = pad + i * spacing
            points.append((x, y_for(r.hours)))
        if len(points) > 1:
            c.create_line(*[v for p in points for v in p], fill=ZZZ, width=2, smooth=True)
        for x, y in points:
            c.create_oval(x - 3, y - 3, x + 3, y + 3, fill=MOON, outline="")

    def _draw_constellation(self, stars: int) -> None:
        c = self.constellation
        c.delete("all")
        w = max(1, c.winfo_width())
        h = max(1, int(c.cget("height")))
        cx, cy = w / 2, h / 2
        if stars <= 0:
            c.create_text(cx, cy, text="Play Catch the Zzz to earn Dream Stars", fill="gray")
            return
        for dx, dy in constellation_points(stars):
            c.create_line(cx, cy, cx + dx, cy + dy, fill="#2b2f5c")
        for dx, dy in constellation_points(stars):
            x, y = cx + dx, cy + dy
            c.create_text(x, y, text="★", fill=MOON, font=("Arial", 14))
        c.create_text(cx, cy, text=str(stars), fill="white", font=("Arial", 18, "bold"))

    def _refresh_settings(self) -> None:
        s = self.store.stats
        self.collection_labels["Total Stars"].configure(text=str(s.dream_stars))
        self.collection_labels["Day Streak"].configure(text=str(s.current_streak))
        self.collection_labels["Nights Logged"].configure(text=str(s.total_sleep_entries))

    def _on_timeframe_changed(self, value: str) -> None:
        self._timeframe = TIMEFRAMES.get(value, DEFAULT_WINDOW_DAYS)
        self._refresh_insights()

    # Home actions
    def start_sleep(self) -> None:
        self.store.start_session()

    def cancel_sleep(self) -> None:
        self.store.cancel_session()

    def wake_up(self) -> None:
        hours = self.store.end_session()
        if hours is not None:
            messagebox.showinfo(APP_TITLE, f"You slept for {hours:.1f} hours. Sweet dreams!")

    def step_goal(self, direction: int) -> None:
        if self.store.can_step_goal(direction):
            self.store.step_goal(direction)

    def open_log_dialog(self) -> None:
        LogSleepDialog(self.root, self.store)

    def open_manual_dialog(self) -> None:
        ManualEntryDialog(self.root, self.store)

    def confirm_reset(self) -> None:
        ok = messagebox.askyesno(
            "Reset Progress",
            "This will permanently delete all your sleep data, statistics, and Dream Stars. "
            "This action cannot be undone.",
            icon="warning",
        )
        if ok:
            self.store.reset_all()

    # Game
    def start_game(self) -> None:
        self._cancel_game_job()
        self.game.start()
        self._sync_game_buttons()
        self._game_last_mono = time.monotonic()
        self._game_job = self.root.after(GAME_FRAME_MS, self._game_frame)

    def game_back_to_menu(self) -> None:
        self.game.back_to_menu()
        self._sync_game_buttons()
        self._draw_game()

    def _game_frame(self) -> None:
        now = time.monotonic()
        self.game.advance(now - self._game_last_mono)
        self._game_last_mono = now
        self._draw_game()
        if self.game.state == GameState.PLAYING:
            self._game_job = self.root.after(GAME_FRAME_MS, self._game_frame)
        else:
            self._game_job = None
            self._sync_game_buttons()

    def _cancel_game_job(self) -> None:
        if self._game_job is not None:
            self.root.after_cancel(self._game_job)
            self._game_job = None

    def _on_game_over(self, stars: int) -> None:
        self.store.add_reward_points(stars)

    def _on_tab_changed(self) -> None:
        if self.tabs.get() != "Game" and self.game.state == GameState.PLAYING:
            self._cancel_game_job()
            self.game.abandon()
            self._sync_game_buttons()
            self._draw_game()

    def _on_canvas_resize(self, event) -> None:
        self.game.resize(event.width, event.height)
        self._draw_game()

    def _on_drag(self, event) -> None:
        if self.game.state == GameState.PLAYING:
            self.game.move_avatar(event.x - self.game.width / 2)

    def _sync_game_buttons(self) -> None:
        state = self.game.state
        if state == GameState.GAME_OVER:
            self.game_primary_btn.configure(text="Play Again", state="normal")
            self.game_menu_btn.pack(side="left", expand=True, fill="x", padx=(4, 0))
        else:
            self.game_menu_btn.pack_forget()
            self.game_primary_btn.configure(
                text="Start Dreaming",
                state="disabled" if state == GameState.PLAYING else "normal",
            )

    def _draw_game(self) -> None:
        c = self.canvas
        g = self.game
        c.delete("all")
        self.game_score_label.configure(text=f"★ {g.score}")
        self.game_lives_label.configure(text="♥" * max(0, g.lives) + "♡" * (GAME_LIVES - max(0, g.lives)))

        if g.state == GameState.MENU:
            c.create_text(g.width / 2, g.height / 3, text="Catch the Zzz", fill="white", font=("Roboto", 24, "bold"))
            c.create_text(
                g.width / 2,
                g.height / 3 + 48,
                text="Drag the moon left and right.\nCatch the floating Zzz bubbles.\nEarn Dream Stars!",
                fill="#cfd6ff",
                justify="center",
            )
            return

        if g.state == GameState.GAME_OVER:
            c.create_text(g.width / 2, g.height / 3, text="Sweet Dreams!", fill="white", font=("Roboto", 24, "bold"))
            c.create_text(
                g.width / 2,
                g.height / 3 + 40,
                text=f"Score {g.score}  ·  +{g.last_reward} Dream Stars",
                fill=MOON,
            )
            return

        for b in g.bubbles:
            c.create_oval(
                b.x - BUBBLE_RADIUS, b.y - BUBBLE_RADIUS, b.x + BUBBLE_RADIUS, b.y + BUBBLE_RADIUS,
                fill="#2b2466", outline=ZZZ,
            )
            c.create_text(b.x, b.y, text="Zzz", fill="white")

        mx, my = g.avatar_position
        c.create_oval(mx - MOON_RADIUS, my - MOON_RADIUS, mx + MOON_RADIUS, my + MOON_RADIUS, fill=MOON, outline="")

    # Tray
    def hide_to_tray(self) -> None:
        self.logger.info("Hide to tray")
        if self.game.state == GameState.PLAYING:
            self._cancel_game_job()
            self.game.abandon()
            self._sync_game_buttons()
        self.tray.ensure_running()
        self.root.withdraw()

    def show_from_tray(self) -> None:
        self.logger.info("Show from tray")

        def _do():
            try:
                self.root.deiconify()
                self.root.lift()
                self.root.focus_force()
            except Exception:
                self.logger.exception("Show from tray failed")

        self.root.after(0, _do)

    def quit_app(self) -> None:
        self.logger.info("Quit requested")

        def _do():
            self._cancel_game_job()
            if self._session_job is not None:
                self.root.after_cancel(self._session_job)
                self._session_job = None
            self.store.unsubscribe(self._on_store_changed)
            self.store.save()
            self.tray.stop()
            self.root.destroy()
            self.logger.info("App stopped")

        self.root.after(0, _do)

    def run(self) -> None:
        self._sync_game_buttons()
        self._draw_game()
        self.root.mainloop()
