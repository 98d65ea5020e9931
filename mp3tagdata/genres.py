# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""ID3v1 genre names, still referenced from ID3v2 TCON frames as "(n)"."""

import re

genres = (
    # ID3v1
    'Blues', 'Classic Rock', 'Country', 'Dance', 'Disco',
    'Funk', 'Grunge', 'Hip-Hop', 'Jazz', 'Metal', 'New Age', 'Oldies',
    'Other', 'Pop', 'R&B', 'Rap', 'Reggae', 'Rock', 'Techno', 'Industrial',
    'Alternative', 'Ska', 'Death Metal', 'Pranks', 'Soundtrack',
    'Euro-Techno', 'Ambient', 'Trip-Hop', 'Vocal', 'Jazz+Funk', 'Fusion',
    'Trance', 'Classical', 'Instrumental', 'Acid', 'House', 'Game',
    'Sound Clip', 'Gospel', 'Noise', 'AlternRock', 'Bass', 'Soul', 'Punk',
    'Space', 'Meditative', 'Instrumental Pop', 'Instrumental Rock',
    'Ethnic', 'Gothic', 'Darkwave', 'Techno-Industrial', 'Electronic',
    'Pop-Folk', 'Eurodance', 'Dream', 'Southern Rock', 'Comedy', 'Cult',
    'Gangsta', 'Top 40', 'Christian Rap', 'Pop/Funk', 'Jungle',
    'Native American', 'Cabaret', 'New Wave', 'Psychadelic', 'Rave',
    'Showtunes', 'Trailer', 'Lo-Fi', 'Tribal', 'Acid Punk', 'Acid Jazz',
    'Polka', 'Retro', 'Musical', 'Rock & Roll', 'Hard Rock',

    # Winamp extensions
    'Folk', 'Folk-Rock', 'National Folk', 'Swing', 'Fast Fusion', 'Bebob',
    'Latin', 'Revival', 'Celtic', 'Bluegrass', 'Avantgarde', 'Gothic Rock',
    'Progressive Rock', 'Psychedelic Rock', 'Symphonic Rock', 'Slow Rock',
    'Big Band', 'Chorus', 'Easy Listening', 'Acoustic', 'Humour', 'Speech',
    'Chanson', 'Opera', 'Chamber Music', 'Sonata', 'Symphony', 'Booty Bass',
    'Primus', 'Porn Groove', 'Satire', 'Slow Jam', 'Club', 'Tango', 'Samba',
    'Folklore', 'Ballad', 'Power Ballad', 'Rhythmic Soul', 'Freestyle',
    'Duet', 'Punk Rock', 'Drum Solo', 'A capella', 'Euro-House',
    'Dance Hall',
    )

max_genre = len(genres) - 1

def get_genre(n):
    "Return the name of genre number n; raise IndexError if unknown."
    if not 0 <= n <= max_genre:
        raise IndexError("Unknown genre number {0}".format(n))
    return genres[n]

_genre_ref = re.compile(r"^\((\d+)\)(.*)$")

def resolve_genre(value):
    """Resolve ID3v1 genre references in a TCON value.

    "(17)" and "17" become "Rock"; "(17)Rock" keeps its refinement text.
    Values that are not references are returned unchanged.
    """
    m = _genre_ref.match(value)
    if m:
        n, rest = int(m.group(1)), m.group(2)
        if rest:
            return rest
    elif value.isdigit():
        n = int(value)
    else:
        return value
    try:
        return get_genre(n)
    except IndexError:
        return value
