from shiny import reactive
from shiny.express import input, render, ui
from shinywidgets import render_plotly

from scotland_demographics.config import TOP_ETHNICITY_SLICES
from scotland_demographics.data_manager import (
    by_age_group,
    by_ethnicity,
    clear_cache,
    get_demographics_data,
    top_ethnicity,
    total_population,
)
from scotland_demographics.plotting import (
    create_age_chart,
    create_ethnicity_chart,
    create_ethnicity_pie,
)

# ======================================================
#  REACTIVE STATE
# ======================================================
# Load once on startup; the artifact is only replaced by a pipeline run.
dataset_store = reactive.Value(get_demographics_data())


@reactive.effect
@reactive.event(input.reload)
def _reload_dataset():
    clear_cache()
    dataset_store.set(get_demographics_data())


@reactive.calc
def age_points():
    return by_age_group(dataset_store.get())


@reactive.calc
def ethnicity_points():
    return by_ethnicity(dataset_store.get())


# ======================================================
#  UI LAYOUT
# ======================================================
ui.page_opts(
    title="Scotland Demographics",
    fillable=False,
    fillable_mobile=True,
    full_width=True,
    id="page",
    lang="en",
)

with ui.layout_columns(col_widths=[4, 4, 4]):
    with ui.value_box():
        "Total Population"

        @render.text
        def total_population_card():
            return f"{total_population(dataset_store.get()):,}"

    with ui.value_box():
        "Most Common Ethnicity"

        @render.text
        def top_ethnicity_card():
            return top_ethnicity(dataset_store.get())

    with ui.value_box():
        "Data Source"

        @render.text
        def source_card():
            return dataset_store.get()["metadata"]["source"]


with ui.layout_columns(col_widths=[6, 6]):
    with ui.card():
        ui.card_header("Population by Age Group")

        @render_plotly
        def age_plot():
            return create_age_chart(age_points())

    with ui.card():
        ui.card_header(f"Ethnicity Breakdown (top {TOP_ETHNICITY_SLICES})")

        @render_plotly
        def ethnicity_pie():
            return create_ethnicity_pie(ethnicity_points())


with ui.card():
    ui.card_header("Detailed Ethnicity Breakdown")

    @render_plotly
    def ethnicity_plot():
        return create_ethnicity_chart(ethnicity_points())


with ui.div(style="display:flex; justify-content:space-between;"):

    @render.text
    def generated_at():
        return f"Generated {dataset_store.get()['metadata']['generatedAt']}"

    ui.input_action_button("reload", "Reload data", class_="btn-primary mt-3")
