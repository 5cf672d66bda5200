import box_annotation.utils.i18n  # noqa:F401
