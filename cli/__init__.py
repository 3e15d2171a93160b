"""Terminal front end for the blackjack table."""
