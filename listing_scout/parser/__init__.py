"""Page classification and listing extraction strategies."""
