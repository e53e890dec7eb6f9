"""
Main pipeline orchestrator for mathoutline.

Runs raster preparation, edge detection, feature enhancement, contour
extraction, person filtering and curve fitting in order.
"""

import os
from collections import namedtuple

from mathoutline.config import PipelineConfig, load_config
from mathoutline.contours.extract import extract_contours
from mathoutline.contours.person_filter import filter_person_contours
from mathoutline.curves.fit import fit_outlines
from mathoutline.curves.render import format_formulas, render_outlines
from mathoutline.deadline import ensure_deadline
from mathoutline.edges.detector import detect_edges
from mathoutline.features.enhance import enhance_edges
from mathoutline.io.load_image import load_image, validate_image_input
from mathoutline.io.save_artifacts import DebugArtifactWriter, ensure_dir, save_image, save_json, save_text
from mathoutline.models import CurveMode, OutlineOptions, OutlineResult
from mathoutline.preprocess.raster_prep import prepare_raster, rgba_from_buffer
from mathoutline.tracer import get_tracer, trace


PipelineOutput = namedtuple("PipelineOutput", ["result", "edges"])


def resolve_options(options, config):
    """
    Build OutlineOptions from a model, a dict or None.

    None takes threshold, smoothing and mode from the config.
    """
    if isinstance(options, OutlineOptions):
        return options
    if options is None:
        return OutlineOptions(
            edge_threshold=config.edges.threshold,
            smoothing=config.edges.smoothing,
            curve_mode=CurveMode(config.curves.mode),
        )
    return OutlineOptions.model_validate(options)


@trace(label="process_image")
def process_image(image, options=None, config=None, deadline=None, debug_writer=None):
    """
    Run every stage on one image.

    image is an RGBA, RGB or grayscale array. Returns a PipelineOutput with
    the OutlineResult and the enhanced edge raster used for tracing.

    Zero-area images produce an empty result. Raises RasterShapeError for
    arrays of the wrong shape and PipelineCancelled when the deadline passes.
    """
    tracer = get_tracer()
    config = config or PipelineConfig()
    options = resolve_options(options, config)
    deadline = ensure_deadline(deadline)

    prepared = prepare_raster(image)
    width, height = prepared.width, prepared.height

    result = OutlineResult(width=width, height=height, options=options, preset=config.preset)

    if width == 0 or height == 0:
        tracer.event("Zero-area raster, no outlines", level="WARN")
        return PipelineOutput(result, prepared.gray.copy())

    deadline.check("edge detection")
    edges = detect_edges(
        prepared,
        threshold=options.edge_threshold,
        smoothing=options.smoothing,
        config=config.edges,
        deadline=deadline,
        debug_writer=debug_writer,
    )

    deadline.check("feature enhancement")
    enhanced = enhance_edges(edges, prepared, config.features, debug_writer)

    deadline.check("contour extraction")
    contours = extract_contours(enhanced, config.contours, deadline, debug_writer)

    deadline.check("person filtering")
    candidates = filter_person_contours(contours, enhanced, width, height, config.person, debug_writer)

    deadline.check("curve fitting")
    outlines = fit_outlines([c.contour for c in candidates], options.curve_mode, config.curves)

    result.contour_count = len(contours)
    result.candidates = candidates
    result.outlines = outlines

    tracer.event(f"Pipeline complete: contours={len(contours)} candidates={len(candidates)} "
                 f"outlines={len(outlines)}")

    if debug_writer:
        debug_writer.save_image(render_outlines(outlines, width, height), "outlines", "01_outlines.png")
        debug_writer.save_json(result.model_dump(mode="json", exclude={"candidates"}),
                               "outlines", "outlines_metrics.json")

    return PipelineOutput(result, enhanced)


def generate_outlines(image, options=None, config=None, deadline=None, debug_writer=None):
    """
    Generate symbolic outlines for the person-like shapes in an image.

    options: OutlineOptions or a dict with edge_threshold (1-255),
    smoothing (> 0) and curve_mode ("linear", "quadratic", "spline" or
    "all"). Returns a list of outline models; empty for zero-area input.
    """
    return process_image(image, options, config, deadline, debug_writer).result.outlines


def generate_outlines_from_buffer(buffer, width, height, options=None, config=None, deadline=None):
    """
    generate_outlines for a flat RGBA byte buffer.

    Raises RasterShapeError when len(buffer) != width * height * 4.
    """
    return generate_outlines(rgba_from_buffer(buffer, width, height), options, config, deadline)


@trace(label="run_pipeline")
def run_pipeline(input_path, out_dir, options=None, config=None, config_path=None,
                 preset=None, debug=False, deadline=None):
    """
    Run the pipeline on an image file and write the results.

    Writes outlines.json (the OutlineResult), formulas.txt (Desmos-style
    formula blocks) and edges.png (edge preview) into out_dir.

    Returns the OutlineResult.
    """
    tracer = get_tracer()

    if config is None:
        config = load_config(config_path, preset)

    debug = debug or config.debug.enabled

    errors = validate_image_input(input_path)
    if errors:
        for error in errors:
            tracer.event(error, level="ERROR")
        raise ValueError(f"Input validation failed: {errors}")

    ensure_dir(out_dir)

    rgba, metadata = load_image(input_path)
    run_id = os.path.splitext(os.path.basename(input_path))[0] or "run"

    debug_writer = DebugArtifactWriter(
        out_dir, run_id,
        enabled=True,
        max_edge=config.debug.max_edge_scale,
        max_contours=config.debug.max_contours,
    ) if debug else None

    if debug_writer:
        debug_writer.save_image(rgba, "input", "00_input.png")

    result, edges = process_image(rgba, options, config, deadline, debug_writer)
    result.source_path = metadata["source_path"]

    save_json(result, os.path.join(out_dir, "outlines.json"))
    save_text(format_formulas(result.outlines), os.path.join(out_dir, "formulas.txt"))
    if edges.size:
        save_image(edges, os.path.join(out_dir, "edges.png"))

    tracer.event(f"Results written to {out_dir}")

    return result
