# All supported bafseg commands
commands = (
    'segment-baf',
    'segment-baf-sv',
)


# Names of the equivalent segmentation functions in the R package, kept as aliases
command_aliases = {
    'segment.baf.phased': 'segment-baf',
    'segment.baf.phased.sv': 'segment-baf-sv',
}
