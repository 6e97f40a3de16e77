# app.py
import os
from dataclasses import replace

import pandas as pd
import streamlit as st

from timetable.config import load_config
from timetable.data_loader import load_data, to_input
from timetable.generator import generate_schedule
from timetable.validation import ValidationError
from run import schedule_to_dataframe, group_week_matrix, stats_to_frames

# --- НАСТРОЙКА СТРАНИЦЫ ---
st.set_page_config(page_title="Расписание на семестр", layout="wide", initial_sidebar_state="expanded")

st.markdown("""
    <style>
    .stButton>button {
        width: 100%;
        background-color: #ff4b4b;
        color: white;
        font-weight: bold;
        height: 50px;
    }
    .schedule-table {
        width: 100%;
        border-collapse: collapse;
        font-family: Arial, sans-serif;
        font-size: 12px;
    }
    .schedule-table th {
        background-color: #f0f2f6;
        border: 1px solid #ddd;
        padding: 8px;
        text-align: center;
        color: #333;
    }
    .schedule-table td {
        border: 1px solid #ddd;
        padding: 4px;
        vertical-align: top;
        background-color: #fff;
        color: #000;
    }
    </style>
""", unsafe_allow_html=True)


def main():
    cfg = load_config(os.environ.get("TIMETABLE_CONFIG", "config.yaml"))

    with st.sidebar:
        st.title("🗓️ Генерация")
        data_dir = st.text_input("Каталог с данными:", value="data")
        weeks = st.number_input("Недель в семестре:", min_value=1, max_value=52, value=cfg.semester_weeks)
        strategy = st.radio("Алгоритм:", ["smart", "simple"], horizontal=True)
        st.markdown("---")
        page = st.radio("Раздел:", ["Статистика", "Расписание группы", "Все занятия", "Предупреждения"])
        run_clicked = st.button("🚀 СОСТАВИТЬ РАСПИСАНИЕ")

    if run_clicked:
        try:
            data = to_input(load_data(data_dir), int(weeks))
            result = generate_schedule(data, replace(cfg, strategy=strategy))
        except (FileNotFoundError, ValidationError) as e:
            st.error(str(e))
            return
        st.session_state.data = data
        st.session_state.result = result
        st.session_state.df = schedule_to_dataframe(result.schedule, data)

    if "result" not in st.session_state:
        st.warning("Сначала составьте расписание.")
        return

    data = st.session_state.data
    result = st.session_state.result
    df = st.session_state.df
    frames = stats_to_frames(result)

    if page == "Статистика":
        st.header("📊 Статистика")
        s = result.stats
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Всего занятий", s.total_lessons, f"{s.lessons_per_week} в неделю")
        c2.metric("Удовлетворенность", f"{s.satisfaction_rate}%")
        c3.metric("Баланс нагрузки", s.teacher_load_balance)
        c4.metric("Конфликтов", s.conflicts)
        if s.underplaced_pairs:
            st.warning(f"Не размещено пар в неделю: {s.underplaced_pairs}")
        st.subheader("Удовлетворенность по преподавателям")
        st.dataframe(frames["teacher_satisfaction"], use_container_width=True)
        st.subheader("Нагрузка по группам")
        st.dataframe(frames["group_loads"], use_container_width=True)

    elif page == "Расписание группы":
        st.header("📅 Расписание группы")
        sel_group = st.selectbox("Группа:", [g.name for g in data.groups])
        sel_week = st.number_input("Неделя:", min_value=1, max_value=len(result.schedule.weeks) or 1, value=1)
        if sel_group:
            grid = group_week_matrix(df, sel_group, cfg, int(sel_week))
            st.markdown(grid.to_html(escape=True, classes="schedule-table"), unsafe_allow_html=True)

    elif page == "Все занятия":
        st.header("✅ Все занятия")
        st.dataframe(df.drop(columns=["weekday"]), use_container_width=True)
        csv = df.drop(columns=["weekday"]).to_csv(index=False).encode("utf-8")
        st.download_button("📥 Скачать CSV", data=csv, file_name="schedule.csv", mime="text/csv")

    elif page == "Предупреждения":
        st.header("⚠️ Предупреждения")
        if frames["warnings"].empty:
            st.success("Все данные сопоставлены, все пары размещены.")
        else:
            kinds = pd.Series([w.kind for w in result.warnings]).value_counts()
            st.bar_chart(kinds)
            st.dataframe(frames["warnings"], use_container_width=True)


if __name__ == "__main__":
    main()
