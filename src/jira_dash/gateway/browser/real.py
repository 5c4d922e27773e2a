"""Browser gateway backed by click.launch."""

import logging

import click

from jira_dash.gateway.browser.abc import Browser

logger = logging.getLogger(__name__)


class RealBrowser(Browser):
    def launch(self, url: str) -> bool:
        # Non-zero when neither xdg-open/open nor webbrowser could take the URL.
        exit_code = click.launch(url)
        if exit_code != 0:
            logger.warning("Opener exited with %d for %s", exit_code, url)
        return exit_code == 0
